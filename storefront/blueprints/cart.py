"""Cart blueprint - cart lines for the current shopper."""
from flask import Blueprint, current_app, g, jsonify

from storefront.database import get_session
from storefront.exceptions import BusinessLogicError, InvalidQuantity
from storefront.forms.cart_forms import CartEditForm, CartQuantityForm, CartSelectionForm
from storefront.services import cart_service
from storefront.utils.formatters import format_price

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')


def _cart_response(status_code: int = 200):
    """Current cart with totals and display prices."""
    db_session = get_session()
    _, totals = cart_service.get_cart_with_totals(db_session, g.shopper_key)
    symbol = current_app.config.get('CURRENCY_SYMBOL', '₺')

    for line in totals['lines']:
        line['unit_price_display'] = format_price(line['unit_price'], symbol)
        line['line_total_display'] = format_price(line['line_total'], symbol)
    totals['subtotal_display'] = format_price(totals['subtotal'], symbol)
    totals['total_display'] = format_price(totals['total'], symbol)

    return jsonify({'status': 'ok', 'cart': totals}), status_code


def _blank(value):
    return None if value in (None, '') else value


def _invalid_form(form):
    return BusinessLogicError('Invalid cart request.', payload={'errors': form.errors})


@cart_bp.route('/')
def view_cart():
    return _cart_response()


@cart_bp.route('/lines', methods=['POST'])
def add_line():
    """Commit a product selection: merges into an identical line or appends."""
    form = CartSelectionForm()
    if not form.validate():
        raise _invalid_form(form)

    db_session = get_session()
    try:
        cart_service.commit_selection(
            db_session,
            g.shopper_key,
            product_id=form.product_id.data,
            color=_blank(form.color.data),
            size=_blank(form.size.data),
            quantity=_blank(form.quantity.data),
        )
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return _cart_response(201)


@cart_bp.route('/lines/<line_uid>', methods=['PUT'])
def edit_line(line_uid: str):
    """Commit the edit of an existing line."""
    form = CartEditForm()
    if not form.validate():
        raise _invalid_form(form)

    db_session = get_session()
    try:
        line = cart_service.get_editing_line(db_session, g.shopper_key, line_uid)
        cart_service.commit_selection(
            db_session,
            g.shopper_key,
            product_id=line.product_id,
            color=_blank(form.color.data),
            size=_blank(form.size.data),
            quantity=_blank(form.quantity.data),
            editing_line_id=line_uid,
        )
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return _cart_response()


@cart_bp.route('/lines/<line_uid>', methods=['PATCH'])
def update_quantity(line_uid: str):
    """Set a line's quantity; 0 removes it."""
    form = CartQuantityForm()
    if not form.validate():
        raise InvalidQuantity(form.quantity.data)

    db_session = get_session()
    try:
        cart_service.update_line_quantity(db_session, g.shopper_key, line_uid, form.quantity_value)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return _cart_response()


@cart_bp.route('/lines/<line_uid>', methods=['DELETE'])
def delete_line(line_uid: str):
    db_session = get_session()
    try:
        cart_service.remove_line(db_session, g.shopper_key, line_uid)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return _cart_response()


@cart_bp.route('/', methods=['DELETE'])
def clear():
    db_session = get_session()
    try:
        cart_service.clear_cart(db_session, g.shopper_key)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return _cart_response()
