"""Favorites blueprint."""
from flask import Blueprint, g, jsonify

from storefront.database import get_session
from storefront.services import favorites_service

favorites_bp = Blueprint('favorites', __name__, url_prefix='/favorites')


@favorites_bp.route('/')
def list_favorites():
    favorites = favorites_service.get_favorites(get_session(), g.shopper_key)
    return jsonify({'status': 'ok', 'favorites': sorted(favorites)})


@favorites_bp.route('/<int:product_id>/toggle', methods=['POST'])
def toggle(product_id: int):
    db_session = get_session()
    try:
        is_favorite = favorites_service.toggle_favorite(db_session, g.shopper_key, product_id)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise

    return jsonify({'status': 'ok', 'product_id': product_id, 'is_favorite': is_favorite})
