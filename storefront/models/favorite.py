"""Favorite model."""
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base, BigIntPK


class Favorite(Base):
    """Product marked as favorite by a shopper."""

    __tablename__ = 'favorite'
    __table_args__ = (
        UniqueConstraint('shopper_key', 'product_id', name='uq_favorite_shopper_product'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shopper_key = Column(String(64), nullable=False, index=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    product = relationship('Product')

    def __repr__(self):
        return f"<Favorite(shopper_key='{self.shopper_key}', product_id={self.product_id})>"
