"""Products blueprint - catalog listing and the product view."""
from decimal import Decimal, InvalidOperation
from typing import Optional

from flask import Blueprint, current_app, g, jsonify, request

from storefront.database import get_session
from storefront.engine import VariantMatrix, resolve_price
from storefront.exceptions import BusinessLogicError, InvalidPriceInput
from storefront.services import cart_service, catalog_service
from storefront.utils.formatters import format_discount, format_price
from storefront.utils.labels import cta_label

products_bp = Blueprint('products', __name__, url_prefix='/products')


def _price_payload(product) -> dict:
    """PriceResult plus display strings. Raises InvalidPriceInput."""
    price = resolve_price(product)
    symbol = current_app.config.get('CURRENCY_SYMBOL', '₺')
    payload = price.to_dict()
    payload['final_price_display'] = format_price(price.final_price, symbol)
    payload['original_price_display'] = format_price(price.original_price, symbol)
    payload['discount_badge'] = format_discount(price.discount_percentage)
    return payload


def _decimal_arg(name: str) -> Optional[Decimal]:
    raw = request.args.get(name)
    if raw in (None, ''):
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise BusinessLogicError(f'"{name}" must be a number', payload={'value': raw})


@products_bp.route('/')
def list_products():
    """Active catalog with optional discount, price and size filters."""
    db_session = get_session()
    products = catalog_service.list_products(
        db_session,
        discounted_only=request.args.get('discounted', '').lower() in ('1', 'true', 'yes'),
        min_price=_decimal_arg('min_price'),
        max_price=_decimal_arg('max_price'),
        size=request.args.get('size') or None,
    )

    items = []
    for product in products:
        matrix = VariantMatrix.from_product(product)
        item = {
            'id': product.id,
            'name': product.name,
            'in_stock': product.in_stock,
            # A product without variants is sold on its in_stock flag alone
            'available': product.in_stock and (matrix.is_empty or matrix.has_stock()),
            'colors': matrix.colors(),
            'sizes': matrix.all_sizes(),
        }
        try:
            item['price'] = _price_payload(product)
        except InvalidPriceInput as e:
            # One broken product must not take the listing down
            current_app.logger.warning(f"[CATALOG] {e.message}")
            item['price'] = None
            item['price_error'] = e.to_dict()
        items.append(item)

    return jsonify({'status': 'ok', 'products': items})


@products_bp.route('/<int:product_id>')
def product_detail(product_id: int):
    """
    Product view.

    Query args ``color``, ``size`` and ``quantity`` are replayed as picker
    events; ``line`` opens an existing cart line for editing.
    """
    db_session = get_session()
    product = catalog_service.get_product_snapshot(db_session, product_id)

    editing_line = None
    line_uid = request.args.get('line')
    if line_uid:
        editing_line = cart_service.get_editing_line(db_session, g.shopper_key, line_uid)
        if editing_line.product_id != product.id:
            raise BusinessLogicError('The cart line belongs to a different product.')

    machine = cart_service.build_selection(
        product,
        color=request.args.get('color'),
        size=request.args.get('size'),
        quantity=request.args.get('quantity'),
        editing_line=editing_line,
    )
    matrix = machine.matrix
    cta = machine.cta
    language = request.args.get('lang') or current_app.config.get('DEFAULT_LANGUAGE', 'en')
    size_color = machine.state.selected_color if matrix.has_color_axis else None

    return jsonify({
        'status': 'ok',
        'product': {'id': product.id, 'name': product.name, 'in_stock': product.in_stock},
        'price': _price_payload(product),
        'colors': [
            {'color': color, 'available': matrix.is_color_available(color)}
            for color in matrix.colors()
        ],
        'sizes': [
            {'size': size, 'in_stock': in_stock}
            for size, in_stock in matrix.size_availability(size_color)
        ],
        'selection': machine.to_dict(),
        'cta': {'state': cta.value, 'label': cta_label(cta, language), 'enabled': cta.enabled},
    })
