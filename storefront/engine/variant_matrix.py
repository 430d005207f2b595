"""Stock index over a product's (color, size) variants."""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


def _is_positive(stock) -> bool:
    """Stock may be a count or a boolean flag."""
    if stock is None:
        return False
    if isinstance(stock, bool):
        return stock
    return stock > 0


class VariantMatrix:
    """
    Index of variant availability keyed by color, then size.

    Built once per product view. Variants without a color (or size) are stored
    under the empty string, which is how products without that axis are
    represented. Unknown pairs are simply not in stock; lookups never raise.
    """

    def __init__(self, variants: Iterable = ()):
        self._index: Dict[str, Dict[str, bool]] = {}
        for variant in variants:
            color = variant.color or ''
            size = variant.size or ''
            sizes = self._index.setdefault(color, {})
            if size in sizes:
                logger.debug(f"[VARIANTS] Duplicate variant ignored: color={color!r} size={size!r}")
                continue
            sizes[size] = _is_positive(variant.stock)

    @classmethod
    def from_product(cls, product) -> 'VariantMatrix':
        return cls(getattr(product, 'variants', None) or ())

    def __len__(self):
        return sum(len(sizes) for sizes in self._index.values())

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def has_color_axis(self) -> bool:
        return any(color for color in self._index)

    @property
    def has_size_axis(self) -> bool:
        return any(size for sizes in self._index.values() for size in sizes)

    def colors(self) -> List[str]:
        """Distinct colors in first-occurrence order."""
        return [color for color in self._index if color]

    def sizes_for_color(self, color: Optional[str]) -> List[str]:
        """Distinct sizes offered under ``color``; empty if unset or unknown."""
        if not color:
            return []
        return [size for size in self._index.get(color, {}) if size]

    def all_sizes(self) -> List[str]:
        """Distinct sizes across every color, first-occurrence order."""
        seen = {}
        for sizes in self._index.values():
            for size in sizes:
                if size:
                    seen.setdefault(size, True)
        return list(seen)

    def is_in_stock(self, color: Optional[str], size: Optional[str]) -> bool:
        """True iff the exact (color, size) pair exists with positive stock."""
        if color is None or size is None:
            return False
        return self._index.get(color, {}).get(size, False)

    def is_color_available(self, color: Optional[str]) -> bool:
        """True iff at least one size under ``color`` is in stock."""
        if color is None:
            return False
        return any(self._index.get(color, {}).values())

    def has_stock(self) -> bool:
        return any(any(sizes.values()) for sizes in self._index.values())

    def size_availability(self, color: Optional[str]) -> List[Tuple[str, bool]]:
        """(size, in_stock) pairs for the size picker of ``color``."""
        sizes = self._index.get(color or '', {})
        return [(size, in_stock) for size, in_stock in sizes.items() if size]
