"""Cart Service - persistent cart operations per shopper."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy.orm import Session

from storefront.engine import cart_reconciler
from storefront.engine.pricing import CENT, line_total
from storefront.engine.selection import SelectionStateMachine
from storefront.exceptions import BusinessLogicError, LineNotFound, QuantityLimitExceeded
from storefront.models import Cart, CartLine
from storefront.services import catalog_service

logger = logging.getLogger(__name__)


def get_cart(session: Session, shopper_key: str) -> Optional[Cart]:
    return session.query(Cart).filter(Cart.shopper_key == shopper_key).first()


def get_or_create_cart(session: Session, shopper_key: str) -> Cart:
    """
    Get existing cart or create new one for the shopper.
    One cart per shopper.
    """
    cart = get_cart(session, shopper_key)
    if not cart:
        cart = Cart(shopper_key=shopper_key)
        session.add(cart)
        # Only flush to get an id; the caller owns the transaction
        session.flush()
    return cart


def load_lines(cart: Optional[Cart]) -> List[cart_reconciler.CartLine]:
    """Copy persisted rows into engine cart lines."""
    if cart is None:
        return []
    return [
        cart_reconciler.CartLine(
            line_id=row.line_uid,
            product_id=row.product_id,
            color=row.color,
            size=row.size,
            quantity=row.qty,
            unit_price=row.unit_price,
        )
        for row in cart.lines
    ]


def _write_lines(session: Session, cart: Cart, lines: List[cart_reconciler.CartLine]) -> None:
    """Persist the reconciled lines, touching only rows that changed."""
    now = datetime.now()
    rows = {row.line_uid: row for row in cart.lines}
    wanted = {line.line_id for line in lines}

    # Deletes go first so a merged line never collides with the row it replaces
    for line_uid, row in rows.items():
        if line_uid not in wanted:
            cart.lines.remove(row)
    session.flush()

    for line in lines:
        row = rows.get(line.line_id)
        if row is None:
            cart.lines.append(CartLine(
                line_uid=line.line_id,
                product_id=line.product_id,
                color=line.color,
                size=line.size,
                qty=line.quantity,
                unit_price=line.unit_price,
                updated_at=now,
            ))
        elif (row.product_id, row.color, row.size, row.qty, row.unit_price) != \
                (line.product_id, line.color, line.size, line.quantity, line.unit_price):
            row.color = line.color
            row.size = line.size
            row.qty = line.quantity
            row.unit_price = line.unit_price
            row.updated_at = now

    cart.updated_at = now
    session.flush()


def _line_limit() -> int:
    return current_app.config.get('MAX_LINE_QUANTITY', 99)


def _check_limit(lines: List[cart_reconciler.CartLine]) -> None:
    """Raise QuantityLimitExceeded if any line went over MAX_LINE_QUANTITY."""
    limit = _line_limit()
    for line in lines:
        if line.quantity > limit:
            raise QuantityLimitExceeded(line.quantity, limit)


def build_selection(product, color: Optional[str] = None, size: Optional[str] = None,
                    quantity: Any = None, editing_line: Optional[cart_reconciler.CartLine] = None
                    ) -> SelectionStateMachine:
    """Replay product-view events against a fresh state machine."""
    machine = SelectionStateMachine(product)
    if editing_line is not None:
        machine.open_for_edit(editing_line)
    if color is not None:
        machine.select_color(color)
    if size is not None:
        machine.select_size(size)
    if quantity is not None:
        machine.set_quantity(quantity)
    return machine


def find_line(lines: List[cart_reconciler.CartLine], line_uid: str) -> cart_reconciler.CartLine:
    line = next((line for line in lines if line.line_id == line_uid), None)
    if line is None:
        raise LineNotFound(line_uid)
    return line


def get_editing_line(session: Session, shopper_key: str, line_uid: str) -> cart_reconciler.CartLine:
    """The shopper's cart line about to be edited, or LineNotFound."""
    return find_line(load_lines(get_cart(session, shopper_key)), line_uid)


def commit_selection(
    session: Session,
    shopper_key: str,
    product_id: int,
    color: Optional[str] = None,
    size: Optional[str] = None,
    quantity: Any = None,
    editing_line_id: Optional[str] = None,
) -> List[cart_reconciler.CartLine]:
    """
    Add a selection to the shopper's cart, or commit an edit of one line.

    Raises:
        NotFoundError: product missing or inactive.
        LineNotFound: the edited line was removed meanwhile.
        InvalidQuantity: quantity is not a whole number >= 1.
        SelectionNotPurchasable: incomplete, out of stock, or unchanged edit.
        InvalidPriceInput: product pricing is malformed.
    """
    product = catalog_service.get_product_snapshot(session, product_id)
    cart = get_or_create_cart(session, shopper_key)
    lines = load_lines(cart)

    editing_line = None
    if editing_line_id is not None:
        editing_line = find_line(lines, editing_line_id)
        if editing_line.product_id != product.id:
            raise BusinessLogicError('The cart line belongs to a different product.')

    machine = build_selection(product, color, size, quantity, editing_line)
    if machine.quantity_error is not None:
        raise machine.quantity_error
    selection = machine.resolve()

    updated = cart_reconciler.commit_selection(lines, selection, editing_line_id)
    _check_limit(updated)
    _write_lines(session, cart, updated)

    logger.info(
        f"[CART] shopper={shopper_key} {'edit ' + editing_line_id if editing_line_id else 'add'} "
        f"product={product_id} color='{selection.color}' size='{selection.size}' qty={selection.quantity}"
    )
    return updated


def update_line_quantity(session: Session, shopper_key: str, line_uid: str, quantity: int
                         ) -> List[cart_reconciler.CartLine]:
    """Set a line's quantity from the cart drawer; 0 or less removes the line."""
    cart = get_cart(session, shopper_key)
    if cart is None:
        raise LineNotFound(line_uid)

    updated = cart_reconciler.set_line_quantity(load_lines(cart), line_uid, quantity)
    _check_limit(updated)
    _write_lines(session, cart, updated)
    return updated


def remove_line(session: Session, shopper_key: str, line_uid: str) -> None:
    """Remove line from cart."""
    cart = get_cart(session, shopper_key)
    if cart:
        _write_lines(session, cart, cart_reconciler.remove_line(load_lines(cart), line_uid))


def clear_cart(session: Session, shopper_key: str) -> None:
    """Clear all lines from cart."""
    cart = get_cart(session, shopper_key)
    if cart:
        _write_lines(session, cart, [])
        logger.info(f"[CART] shopper={shopper_key} cleared")


def merge_carts(session: Session, from_key: str, to_key: str) -> List[cart_reconciler.CartLine]:
    """
    Move a guest cart into another shopper's cart (e.g. after sign in).

    Identical lines add their quantities, capped at MAX_LINE_QUANTITY; the
    source cart is deleted.
    """
    target = get_or_create_cart(session, to_key)
    source = get_cart(session, from_key)
    if source is None or source.id == target.id:
        return load_lines(target)

    merged = cart_reconciler.merge_carts(load_lines(target), load_lines(source))
    limit = _line_limit()
    for line in merged:
        if line.quantity > limit:
            logger.warning(f"[CART] merge of {from_key} capped line {line.line_id} at {limit} (was {line.quantity})")
            line.quantity = limit
    session.delete(source)
    session.flush()
    _write_lines(session, target, merged)
    logger.info(f"[CART] merged cart of {from_key} into {to_key} ({len(merged)} lines)")
    return merged


def _recency(row: CartLine):
    # Rows loaded back from the database may carry a tzinfo the in-session ones lack
    touched = row.updated_at.replace(tzinfo=None) if row.updated_at else datetime.min
    return (touched, row.id or 0)


def calculate_cart_totals(cart: Optional[Cart]) -> Dict[str, Any]:
    """Calculate totals for cart, most recently touched line first."""
    lines_details = []
    subtotal = Decimal('0')
    item_count = 0

    rows = sorted(cart.lines, key=_recency, reverse=True) if cart else []
    for row in rows:
        line_subtotal = line_total(row.unit_price, row.qty)
        lines_details.append({
            'line_id': row.line_uid,
            'product_id': row.product_id,
            'product_name': row.product.name if row.product else '',
            'color': row.color,
            'size': row.size,
            'qty': row.qty,
            'unit_price': row.unit_price,
            'line_total': line_subtotal,
        })
        subtotal += line_subtotal
        item_count += row.qty

    return {
        'subtotal': subtotal.quantize(CENT),
        'total': subtotal.quantize(CENT),
        'item_count': item_count,
        'lines': lines_details,
    }


def get_cart_with_totals(session: Session, shopper_key: str) -> Tuple[Optional[Cart], Dict[str, Any]]:
    """Get cart with totals dictionary."""
    cart = get_cart(session, shopper_key)
    return cart, calculate_cart_totals(cart)
