"""
Cart reconciliation.

Every function takes the current lines and returns a new list; the input is
never mutated. Invariant: at most one line per (product_id, color, size).
"""
import logging
import uuid
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from storefront.exceptions import LineNotFound

logger = logging.getLogger(__name__)


def new_line_id() -> str:
    return str(uuid.uuid4())


class CartLine:
    """One line of a cart with the unit price captured when it was added."""

    __slots__ = ('line_id', 'product_id', 'color', 'size', 'quantity', 'unit_price')

    def __init__(self, line_id: str, product_id, color: str, size: str, quantity: int, unit_price: Decimal):
        self.line_id = line_id
        self.product_id = product_id
        self.color = color
        self.size = size
        self.quantity = quantity
        self.unit_price = unit_price

    @property
    def key(self):
        return (self.product_id, self.color, self.size)

    def copy(self) -> 'CartLine':
        return CartLine(self.line_id, self.product_id, self.color, self.size, self.quantity, self.unit_price)

    def __eq__(self, other):
        if not isinstance(other, CartLine):
            return NotImplemented
        return (self.line_id, self.key, self.quantity, self.unit_price) == \
            (other.line_id, other.key, other.quantity, other.unit_price)

    def __repr__(self):
        return (f"<CartLine(line_id='{self.line_id}', product_id={self.product_id}, "
                f"color='{self.color}', size='{self.size}', qty={self.quantity})>")


def _find(lines: List[CartLine], predicate) -> Optional[CartLine]:
    return next((line for line in lines if predicate(line)), None)


def commit_selection(cart: Iterable[CartLine], selection, editing_line_id: Optional[str] = None,
                     id_factory: Callable[[], str] = new_line_id) -> List[CartLine]:
    """
    Apply a resolved selection to the cart.

    - Editing: the edited line takes the selection's color, size, quantity and
      unit price. If another line already holds that combination, the
      quantity is merged there and the edited line is dropped.
    - Adding: an identical line gets its quantity increased; otherwise a new
      line is appended with a fresh id.

    Raises:
        LineNotFound: ``editing_line_id`` is not in the cart.
    """
    lines = [line.copy() for line in cart]

    if editing_line_id is not None:
        target = _find(lines, lambda line: line.line_id == editing_line_id)
        if target is None:
            raise LineNotFound(editing_line_id)

        other = _find(lines, lambda line: line.key == selection.key and line.line_id != editing_line_id)
        if other is not None:
            logger.debug(f"[RECONCILE] edit of {editing_line_id} merged into {other.line_id}")
            other.quantity += selection.quantity
            lines.remove(target)
            return lines

        logger.debug(f"[RECONCILE] overwrite {editing_line_id} with {selection!r}")
        target.color = selection.color
        target.size = selection.size
        target.quantity = selection.quantity
        target.unit_price = selection.unit_price
        return lines

    existing = _find(lines, lambda line: line.key == selection.key)
    if existing is not None:
        logger.debug(f"[RECONCILE] merge {selection.quantity} into {existing.line_id}")
        existing.quantity += selection.quantity
        return lines

    line = CartLine(
        line_id=id_factory(),
        product_id=selection.product_id,
        color=selection.color,
        size=selection.size,
        quantity=selection.quantity,
        unit_price=selection.unit_price,
    )
    logger.debug(f"[RECONCILE] append {line!r}")
    lines.append(line)
    return lines


def set_line_quantity(cart: Iterable[CartLine], line_id: str, quantity: int) -> List[CartLine]:
    """Set a line's quantity; zero or less removes the line."""
    lines = [line.copy() for line in cart]
    target = _find(lines, lambda line: line.line_id == line_id)
    if target is None:
        raise LineNotFound(line_id)
    if quantity <= 0:
        lines.remove(target)
    else:
        target.quantity = quantity
    return lines


def remove_line(cart: Iterable[CartLine], line_id: str) -> List[CartLine]:
    """Drop a line; removing a missing line is a no-op."""
    return [line.copy() for line in cart if line.line_id != line_id]


def merge_carts(target: Iterable[CartLine], incoming: Iterable[CartLine],
                id_factory: Callable[[], str] = new_line_id) -> List[CartLine]:
    """Fold ``incoming`` lines into ``target``, adding quantities of identical lines."""
    lines = [line.copy() for line in target]
    for line in incoming:
        existing = _find(lines, lambda candidate: candidate.key == line.key)
        if existing is not None:
            existing.quantity += line.quantity
        else:
            merged = line.copy()
            merged.line_id = id_factory()
            lines.append(merged)
    return lines
