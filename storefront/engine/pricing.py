"""
Price resolution for catalog products.

Works on anything exposing ``price`` and ``original_price`` attributes: the
``Product`` model, a cached ``ProductSnapshot`` or a test double.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from storefront.exceptions import InvalidPriceInput

CENT = Decimal('0.01')
HUNDRED = Decimal('100')


class PriceResult:
    """Normalized price of a product as shown and charged."""

    __slots__ = ('original_price', 'discounted_price', 'final_price', 'has_discount', 'discount_percentage')

    def __init__(self, original_price: Decimal, discounted_price: Decimal, final_price: Decimal,
                 has_discount: bool, discount_percentage: int):
        self.original_price = original_price
        self.discounted_price = discounted_price
        self.final_price = final_price
        self.has_discount = has_discount
        self.discount_percentage = discount_percentage

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_price': self.original_price,
            'discounted_price': self.discounted_price,
            'final_price': self.final_price,
            'has_discount': self.has_discount,
            'discount_percentage': self.discount_percentage,
        }

    def __eq__(self, other):
        if not isinstance(other, PriceResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"<PriceResult(final={self.final_price}, original={self.original_price}, "
                f"discount={self.discount_percentage}%)>")


def _to_decimal(value: Any, field: str, product_id: Optional[Any]) -> Decimal:
    if value is None:
        raise InvalidPriceInput(f"Product {field} is missing", product_id)
    if isinstance(value, bool):
        raise InvalidPriceInput(f"Product {field} must be numeric, got a boolean", product_id)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidPriceInput(f"Product {field} is not a number: {value!r}", product_id)
    if not number.is_finite():
        raise InvalidPriceInput(f"Product {field} must be finite", product_id)
    if number < 0:
        raise InvalidPriceInput(f"Product {field} cannot be negative: {number}", product_id)
    return number


def discount_percentage(original_price: Decimal, price: Decimal) -> int:
    """Whole-number discount, rounded half-up: 150 -> 100 gives 33."""
    ratio = (original_price - price) * HUNDRED / original_price
    return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def resolve_price(product) -> PriceResult:
    """
    Map a product's base and original prices to a PriceResult.

    A discount exists only when ``original_price`` is present and strictly
    greater than ``price``. Reductions that round to 0% are not shown as a
    discount, so ``has_discount`` always agrees with ``discount_percentage > 0``.

    Raises:
        InvalidPriceInput: price missing, non-numeric or negative, or a
            negative/non-numeric original price.
    """
    product_id = getattr(product, 'id', None)
    price = _to_decimal(getattr(product, 'price', None), 'price', product_id)

    raw_original = getattr(product, 'original_price', None)
    original = None
    if raw_original is not None:
        original = _to_decimal(raw_original, 'original price', product_id)

    percentage = 0
    if original is not None and original > price:
        percentage = discount_percentage(original, price)

    has_discount = percentage > 0
    return PriceResult(
        original_price=original if has_discount else price,
        discounted_price=price,
        final_price=price,
        has_discount=has_discount,
        discount_percentage=percentage,
    )


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Unit price times quantity, rounded half-up to cents."""
    return (Decimal(str(unit_price)) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)
