"""Favorites Service - favorites persistence per shopper."""

import logging

from sqlalchemy.orm import Session

from storefront.engine import FavoritesSet
from storefront.models import Favorite
from storefront.services import catalog_service

logger = logging.getLogger(__name__)


def get_favorites(session: Session, shopper_key: str) -> FavoritesSet:
    rows = session.query(Favorite.product_id).filter(Favorite.shopper_key == shopper_key).all()
    return FavoritesSet(product_id for (product_id,) in rows)


def _save(session: Session, shopper_key: str, favorites: FavoritesSet) -> None:
    """Write the set back as rows: insert new ids, delete dropped ones."""
    rows = session.query(Favorite).filter(Favorite.shopper_key == shopper_key).all()
    stored = {row.product_id: row for row in rows}

    for product_id, row in stored.items():
        if product_id not in favorites:
            session.delete(row)
    for product_id in favorites:
        if product_id not in stored:
            session.add(Favorite(shopper_key=shopper_key, product_id=product_id))
    session.flush()


def toggle_favorite(session: Session, shopper_key: str, product_id: int) -> bool:
    """Flip a product in or out of the shopper's favorites; returns the new membership."""
    favorites = get_favorites(session, shopper_key)
    if product_id not in favorites:
        # Only existing products can be added; removing a stale id is always allowed
        catalog_service.get_product(session, product_id)

    is_favorite = favorites.toggle(product_id)
    _save(session, shopper_key, favorites)
    logger.info(f"[FAVORITES] shopper={shopper_key} product={product_id} favorite={is_favorite}")
    return is_favorite


def merge_favorites(session: Session, from_key: str, to_key: str) -> FavoritesSet:
    """Union a guest's favorites into another shopper's favorites."""
    if from_key == to_key:
        return get_favorites(session, to_key)

    merged = get_favorites(session, to_key).merge(get_favorites(session, from_key))
    session.query(Favorite).filter(Favorite.shopper_key == from_key).delete(synchronize_session=False)
    _save(session, to_key, merged)
    return merged
