"""Product model."""
from decimal import Decimal, InvalidOperation
from sqlalchemy import Column, String, Text, Boolean, Numeric, DateTime, and_
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from storefront.database import Base, BigIntPK
from storefront.exceptions import InvalidPriceInput


class Product(Base):
    """Catalog product; sellable combinations live in ``variants``."""

    __tablename__ = 'product'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)  # Pre-discount price, NULL when not on sale
    in_stock = Column(Boolean, nullable=False, default=True, server_default='true')
    active = Column(Boolean, nullable=False, default=True, server_default='true')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    variants = relationship(
        'ProductVariant',
        back_populates='product',
        cascade='all, delete-orphan',
        order_by='ProductVariant.id',
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"

    def _as_price(self, value, label):
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidPriceInput(f"Invalid {label} for '{self.name}': {value!r}", self.id)
        if not number.is_finite() or number < 0:
            raise InvalidPriceInput(f"Invalid {label} for '{self.name}': {value}", self.id)
        return number

    @validates('price')
    def _validate_price(self, key, value):
        if value is None:
            raise InvalidPriceInput(f"Price is required for '{self.name}'", self.id)
        value = self._as_price(value, 'price')
        if self.original_price is not None and Decimal(str(self.original_price)) <= value:
            raise InvalidPriceInput(
                f"Original price {self.original_price} must be greater than price {value}", self.id
            )
        return value

    @validates('original_price')
    def _validate_original_price(self, key, value):
        if value is None:
            return value
        value = self._as_price(value, 'original price')
        if self.price is not None and value <= Decimal(str(self.price)):
            raise InvalidPriceInput(
                f"Original price {value} must be greater than price {self.price}", self.id
            )
        return value

    def set_pricing(self, price, original_price=None):
        """Replace both prices; the pair is checked first so a rejected update leaves both untouched."""
        if price is None:
            raise InvalidPriceInput(f"Price is required for '{self.name}'", self.id)
        price = self._as_price(price, 'price')
        if original_price is not None:
            original_price = self._as_price(original_price, 'original price')
            if original_price <= price:
                raise InvalidPriceInput(
                    f"Original price {original_price} must be greater than price {price}", self.id
                )
        self.original_price = None
        self.price = price
        self.original_price = original_price

    @hybrid_property
    def is_discounted(self):
        return self.original_price is not None and self.original_price > self.price

    @is_discounted.expression
    def is_discounted(cls):
        return and_(cls.original_price.isnot(None), cls.original_price > cls.price)
