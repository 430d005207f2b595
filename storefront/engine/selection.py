"""
Selection state machine for the product view.

Tracks the shopper's in-progress color/size/quantity choice and derives the
purchase readiness and the state of the buy control (CTA) after every event.

States::

    EMPTY --select_color--> COLOR_CHOSEN --select_size--> COLOR_AND_SIZE_CHOSEN
      ^                          |
      +---- select_color(None) --+

Choosing a different color always drops the chosen size. Edit mode is an
orthogonal flag: it only changes the CTA and where the commit goes.
"""
import enum
import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional

from storefront.engine.pricing import resolve_price
from storefront.engine.variant_matrix import VariantMatrix
from storefront.exceptions import InvalidQuantity, SelectionNotPurchasable

logger = logging.getLogger(__name__)

_WHOLE_NUMBER = re.compile(r'^\s*\+?[0-9]+\s*$', re.ASCII)


class SelectionTier(enum.Enum):
    """How far the shopper got through the pickers."""
    EMPTY = 'empty'
    COLOR_CHOSEN = 'color_chosen'
    COLOR_AND_SIZE_CHOSEN = 'color_and_size_chosen'


class CtaState(enum.Enum):
    """Symbolic buy-control state; display text comes from ``utils.labels``."""
    NEED_COLOR = 'NeedColor'
    NEED_SIZE = 'NeedSize'
    OUT_OF_STOCK = 'OutOfStock'
    ADD_TO_CART = 'AddToCart'
    UPDATE_DISABLED = 'UpdateDisabled'
    UPDATE_ENABLED = 'UpdateEnabled'

    @property
    def enabled(self) -> bool:
        return self in (CtaState.ADD_TO_CART, CtaState.UPDATE_ENABLED)


def resolve_cta(is_color_valid: bool, is_size_valid: bool, product_in_stock: bool,
                is_variant_in_stock: bool, edit_mode: bool, is_updated: bool) -> CtaState:
    """The CTA decision table. First matching row wins."""
    if not is_color_valid:
        return CtaState.NEED_COLOR
    if not is_size_valid:
        return CtaState.NEED_SIZE
    if not product_in_stock or not is_variant_in_stock:
        return CtaState.OUT_OF_STOCK
    if not edit_mode:
        return CtaState.ADD_TO_CART
    return CtaState.UPDATE_DISABLED if is_updated else CtaState.UPDATE_ENABLED


def parse_quantity(value: Any) -> int:
    """
    Strict quantity parsing: integers >= 1, or strings holding one.

    Raises:
        InvalidQuantity: anything else (booleans, fractions, text, < 1).
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantity(value)
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, Decimal) and value == value.to_integral_value():
        quantity = int(value)
    elif isinstance(value, str) and _WHOLE_NUMBER.match(value):
        quantity = int(value.strip())
    else:
        raise InvalidQuantity(value)
    if quantity < 1:
        raise InvalidQuantity(value)
    return quantity


class SelectionState:
    """Mutable selection data owned by one product view."""

    def __init__(self):
        self.selected_color: Optional[str] = None
        self.selected_size: Optional[str] = None
        self.quantity: int = 1
        self.edit_mode: bool = False
        self.editing_line_id: Optional[str] = None

    def __repr__(self):
        return (f"<SelectionState(color={self.selected_color!r}, size={self.selected_size!r}, "
                f"qty={self.quantity}, edit={self.editing_line_id!r})>")


class ResolvedSelection:
    """A purchasable selection, ready for the cart reconciler."""

    __slots__ = ('product_id', 'color', 'size', 'quantity', 'unit_price')

    def __init__(self, product_id, color: str, size: str, quantity: int, unit_price: Decimal):
        self.product_id = product_id
        self.color = color
        self.size = size
        self.quantity = quantity
        self.unit_price = unit_price

    @property
    def key(self):
        return (self.product_id, self.color, self.size)

    def __repr__(self):
        return (f"<ResolvedSelection(product_id={self.product_id}, color='{self.color}', "
                f"size='{self.size}', qty={self.quantity})>")


class SelectionStateMachine:
    """Selection of one product, re-derived after every transition."""

    def __init__(self, product, matrix: Optional[VariantMatrix] = None):
        self.product = product
        self.matrix = matrix if matrix is not None else VariantMatrix.from_product(product)
        self.state = SelectionState()
        self.quantity_error: Optional[InvalidQuantity] = None
        self._baseline = None

    # -- transitions -------------------------------------------------------

    def select_color(self, color: Optional[str]) -> SelectionTier:
        color = color or None
        if color != self.state.selected_color:
            logger.debug(f"[SELECTION] product={self.product.id} color {self.state.selected_color!r} -> {color!r}")
            self.state.selected_color = color
            self.state.selected_size = None
        return self.tier

    def select_size(self, size: Optional[str]) -> bool:
        """Pick a size; refused (False) while the product still needs a color."""
        size = size or None
        if size is not None and self.state.selected_color is None and self.matrix.has_color_axis:
            logger.debug(f"[SELECTION] product={self.product.id} size {size!r} ignored, no color chosen")
            return False
        self.state.selected_size = size
        return True

    def set_quantity(self, value: Any) -> bool:
        """
        Set the quantity. Invalid input is clamped to 1 and kept as
        ``quantity_error`` for the view to display; never raises.
        """
        try:
            self.state.quantity = parse_quantity(value)
            self.quantity_error = None
            return True
        except InvalidQuantity as e:
            self.state.quantity = 1
            self.quantity_error = e
            return False

    def open_for_edit(self, line) -> None:
        """Start editing an existing cart line, preselecting its values."""
        self.state.edit_mode = True
        self.state.editing_line_id = line.line_id
        self.state.selected_color = line.color or None
        self.state.selected_size = line.size or None
        self.state.quantity = line.quantity
        self.quantity_error = None
        self._baseline = self._current_values()

    # -- derived state -----------------------------------------------------

    def _current_values(self):
        return (self.state.selected_color, self.state.selected_size, self.state.quantity)

    @property
    def tier(self) -> SelectionTier:
        if self.state.selected_size is not None:
            return SelectionTier.COLOR_AND_SIZE_CHOSEN
        if self.state.selected_color is not None:
            return SelectionTier.COLOR_CHOSEN
        return SelectionTier.EMPTY

    @property
    def resolved_color(self) -> Optional[str]:
        if not self.matrix.has_color_axis:
            return ''
        return self.state.selected_color

    @property
    def resolved_size(self) -> Optional[str]:
        if not self.matrix.has_size_axis:
            return ''
        return self.state.selected_size

    @property
    def is_color_valid(self) -> bool:
        return self.resolved_color is not None

    @property
    def is_size_valid(self) -> bool:
        return self.resolved_size is not None

    @property
    def product_in_stock(self) -> bool:
        return bool(getattr(self.product, 'in_stock', False))

    @property
    def is_variant_in_stock(self) -> bool:
        if self.matrix.is_empty or not (self.is_color_valid and self.is_size_valid):
            return self.product_in_stock
        return self.matrix.is_in_stock(self.resolved_color, self.resolved_size)

    @property
    def is_updated(self) -> bool:
        return self.state.edit_mode and self._current_values() == self._baseline

    @property
    def cta(self) -> CtaState:
        return resolve_cta(
            is_color_valid=self.is_color_valid,
            is_size_valid=self.is_size_valid,
            product_in_stock=self.product_in_stock,
            is_variant_in_stock=self.is_variant_in_stock,
            edit_mode=self.state.edit_mode,
            is_updated=self.is_updated,
        )

    def resolve(self) -> ResolvedSelection:
        """
        Freeze the current selection for the cart.

        Raises:
            SelectionNotPurchasable: the CTA is not in an enabled state.
            InvalidPriceInput: the product's pricing is malformed.
        """
        cta = self.cta
        if not cta.enabled:
            raise SelectionNotPurchasable(cta)
        price = resolve_price(self.product)
        return ResolvedSelection(
            product_id=self.product.id,
            color=self.resolved_color,
            size=self.resolved_size,
            quantity=self.state.quantity,
            unit_price=price.final_price,
        )

    def to_dict(self) -> Dict[str, Any]:
        cta = self.cta
        return {
            'selected_color': self.state.selected_color,
            'selected_size': self.state.selected_size,
            'quantity': self.state.quantity,
            'edit_mode': self.state.edit_mode,
            'editing_line_id': self.state.editing_line_id,
            'tier': self.tier.value,
            'cta': cta.value,
            'cta_enabled': cta.enabled,
            'quantity_error': self.quantity_error.message if self.quantity_error else None,
        }
