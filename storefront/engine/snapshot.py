"""Immutable catalog snapshots handed to the engine by the catalog provider."""
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple


class VariantSnapshot:
    """One (color, size) combination and its stock count."""

    __slots__ = ('color', 'size', 'stock', 'sku')

    def __init__(self, color: str, size: str, stock, sku: Optional[str] = None):
        object.__setattr__(self, 'color', color or '')
        object.__setattr__(self, 'size', size or '')
        object.__setattr__(self, 'stock', stock)
        object.__setattr__(self, 'sku', sku)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def to_dict(self) -> Dict[str, Any]:
        return {'color': self.color, 'size': self.size, 'stock': self.stock, 'sku': self.sku}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VariantSnapshot':
        return cls(data.get('color'), data.get('size'), data.get('stock'), data.get('sku'))

    def __repr__(self):
        return f"<VariantSnapshot(color='{self.color}', size='{self.size}', stock={self.stock})>"


class ProductSnapshot:
    """Read-only view of a product for the duration of one selection session."""

    __slots__ = ('id', 'name', 'price', 'original_price', 'in_stock', 'variants')

    def __init__(self, id, name: str, price, original_price=None, in_stock: bool = True,
                 variants: Tuple[VariantSnapshot, ...] = ()):
        object.__setattr__(self, 'id', id)
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'price', price)
        object.__setattr__(self, 'original_price', original_price)
        object.__setattr__(self, 'in_stock', in_stock)
        object.__setattr__(self, 'variants', tuple(variants))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    @classmethod
    def from_model(cls, product) -> 'ProductSnapshot':
        """Copy a ``Product`` row (and its variants) out of the ORM session."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            original_price=product.original_price,
            in_stock=bool(product.in_stock),
            variants=tuple(
                VariantSnapshot(v.color, v.size, v.stock, v.sku) for v in product.variants
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'original_price': self.original_price,
            'in_stock': self.in_stock,
            'variants': [v.to_dict() for v in self.variants],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductSnapshot':
        price = data.get('price')
        original_price = data.get('original_price')
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            price=Decimal(str(price)) if price is not None else None,
            original_price=Decimal(str(original_price)) if original_price is not None else None,
            in_stock=bool(data.get('in_stock')),
            variants=tuple(VariantSnapshot.from_dict(v) for v in data.get('variants') or ()),
        )

    def __repr__(self):
        return f"<ProductSnapshot(id={self.id}, name='{self.name}', variants={len(self.variants)})>"
