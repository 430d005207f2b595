"""Models package - exports all SQLAlchemy models."""
from storefront.models.product import Product
from storefront.models.product_variant import ProductVariant
from storefront.models.cart import Cart
from storefront.models.cart_line import CartLine
from storefront.models.favorite import Favorite

__all__ = [
    'Product', 'ProductVariant',
    'Cart', 'CartLine',
    'Favorite',
]
