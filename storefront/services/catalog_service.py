"""Catalog Service - product snapshots for the engine and catalog maintenance."""

import logging
import re
from decimal import Decimal
from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy.orm import Session, selectinload

from storefront.engine import ProductSnapshot
from storefront.exceptions import DuplicateVariant, NotFoundError
from storefront.models import Product, ProductVariant
from storefront.services.cache_service import get_cache

logger = logging.getLogger(__name__)

CACHE_MODULE = 'catalog'

_TR_CHARS = str.maketrans({
    'ş': 's', 'Ş': 'S', 'ı': 'i', 'İ': 'I', 'ğ': 'g', 'Ğ': 'G',
    'ü': 'u', 'Ü': 'U', 'ö': 'o', 'Ö': 'O', 'ç': 'c', 'Ç': 'C',
})


def generate_sku(product_name: str, color: str, size: str) -> str:
    """
    Build a variant SKU like ``TSHIRT-KIRMIZI-36``.

    Turkish characters are transliterated, everything else that is not
    A-Z/0-9 is dropped and each part is cut to 10 characters.
    """
    def normalize(value: str) -> str:
        value = (value or '').translate(_TR_CHARS).upper()
        return re.sub(r'[^A-Z0-9]', '', value)[:10]

    return f"{normalize(product_name)}-{normalize(color)}-{normalize(size)}"


def _cache():
    try:
        return get_cache()
    except RuntimeError:
        return None


def _snapshot_key(product_id: int) -> str:
    return f"product:{product_id}"


def invalidate_product(product_id: int) -> None:
    """Drop the cached snapshot after a catalog write."""
    cache = _cache()
    if cache is not None:
        cache.delete(CACHE_MODULE, _snapshot_key(product_id))


def get_product(session: Session, product_id: int) -> Product:
    """Active product with its variants loaded."""
    product = (
        session.query(Product)
        .options(selectinload(Product.variants))
        .filter(Product.id == product_id, Product.active == True)  # noqa: E712
        .first()
    )
    if not product:
        raise NotFoundError('Product not found.', payload={'product_id': product_id})
    return product


def get_product_snapshot(session: Session, product_id: int) -> ProductSnapshot:
    """
    Catalog provider for the engine: an immutable snapshot of one product.

    Served from Redis when the cache is available; the database is the
    fallback and the source of truth.
    """
    def load():
        return ProductSnapshot.from_model(get_product(session, product_id)).to_dict()

    cache = _cache()
    if cache is None:
        return ProductSnapshot.from_dict(load())

    ttl = current_app.config.get('CACHE_PRODUCTS_TTL', 60)
    data = cache.memoize(CACHE_MODULE, _snapshot_key(product_id), load, ttl)
    return ProductSnapshot.from_dict(data)


def list_products(
    session: Session,
    discounted_only: bool = False,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    size: Optional[str] = None,
) -> List[Product]:
    """Active products, newest first, with the storefront filters applied."""
    query = (
        session.query(Product)
        .options(selectinload(Product.variants))
        .filter(Product.active == True)  # noqa: E712
    )

    if discounted_only:
        query = query.filter(Product.is_discounted)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if size:
        query = query.filter(Product.variants.any(ProductVariant.size == size))

    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def create_product(
    session: Session,
    name: str,
    price: Decimal,
    original_price: Optional[Decimal] = None,
    description: Optional[str] = None,
    in_stock: bool = True,
) -> Product:
    """Create a product; price validation happens on the model."""
    product = Product(name=name, description=description, in_stock=in_stock)
    product.price = price
    product.original_price = original_price
    session.add(product)
    session.flush()
    logger.info(f"[CATALOG] Product created: id={product.id} name='{name}' price={product.price}")
    return product


def update_pricing(session: Session, product_id: int, price: Decimal,
                   original_price: Optional[Decimal] = None) -> Product:
    """Replace both prices at once; an invalid pair raises before anything changes."""
    product = get_product(session, product_id)
    product.set_pricing(price, original_price)
    session.flush()
    invalidate_product(product_id)
    logger.info(f"[CATALOG] Pricing updated: id={product_id} price={price} original={original_price}")
    return product


def add_variants(
    session: Session,
    product_id: int,
    color: str,
    sizes: Iterable[str],
    stock: int = 0,
    barcode: Optional[str] = None,
) -> List[ProductVariant]:
    """
    Add one variant per size under ``color``.

    Raises:
        DuplicateVariant: any (color, size) already exists, compared
            case-insensitively. Nothing is added in that case.
    """
    product = get_product(session, product_id)
    sizes = list(sizes)
    existing = {(v.color.lower(), v.size.lower()) for v in product.variants}
    duplicates = [size for size in sizes if ((color or '').lower(), (size or '').lower()) in existing]
    if duplicates:
        raise DuplicateVariant(color, duplicates)

    created = []
    for size in sizes:
        variant = ProductVariant(
            color=color or '',
            size=size or '',
            sku=generate_sku(product.name, color, size),
            barcode=barcode or None,
            stock=stock,
        )
        product.variants.append(variant)
        created.append(variant)

    session.flush()
    invalidate_product(product_id)
    logger.info(f"[CATALOG] {len(created)} variant(s) added to product {product_id}: {color} {sizes}")
    return created


def set_variant_stock(session: Session, product_id: int, color: str, size: str, stock: int) -> ProductVariant:
    """Overwrite the stock count of one variant."""
    variant = session.query(ProductVariant).filter(
        ProductVariant.product_id == product_id,
        ProductVariant.color == (color or ''),
        ProductVariant.size == (size or ''),
    ).first()
    if not variant:
        raise NotFoundError('Variant not found.', payload={'product_id': product_id, 'color': color, 'size': size})

    variant.stock = stock
    session.flush()
    invalidate_product(product_id)
    return variant
