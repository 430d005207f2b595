"""Selection and pricing engine. Pure, in-memory, no I/O."""
from storefront.engine.pricing import PriceResult, resolve_price, line_total
from storefront.engine.variant_matrix import VariantMatrix
from storefront.engine.selection import (
    SelectionTier, CtaState, SelectionState, SelectionStateMachine, ResolvedSelection,
    resolve_cta, parse_quantity,
)
from storefront.engine.cart_reconciler import (
    CartLine, commit_selection, set_line_quantity, remove_line, merge_carts, new_line_id,
)
from storefront.engine.favorites import FavoritesSet
from storefront.engine.snapshot import ProductSnapshot, VariantSnapshot

__all__ = [
    'PriceResult', 'resolve_price', 'line_total',
    'VariantMatrix',
    'SelectionTier', 'CtaState', 'SelectionState', 'SelectionStateMachine', 'ResolvedSelection',
    'resolve_cta', 'parse_quantity',
    'CartLine', 'commit_selection', 'set_line_quantity', 'remove_line', 'merge_carts', 'new_line_id',
    'FavoritesSet',
    'ProductSnapshot', 'VariantSnapshot',
]
