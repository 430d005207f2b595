"""Cart Line model."""
from sqlalchemy import Column, BigInteger, Integer, Numeric, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base, BigIntPK


class CartLine(Base):
    """
    Cart Line - a product variant with quantity and the unit price captured
    when it was added.
    """

    __tablename__ = 'cart_line'
    __table_args__ = (
        UniqueConstraint('cart_id', 'product_id', 'color', 'size', name='uq_cart_line_variant'),
        UniqueConstraint('cart_id', 'line_uid', name='uq_cart_line_uid'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    cart_id = Column(BigInteger, ForeignKey('cart.id', ondelete='CASCADE'), nullable=False, index=True)
    line_uid = Column(String(36), nullable=False)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=False, index=True)
    color = Column(String(50), nullable=False, default='')
    size = Column(String(20), nullable=False, default='')

    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    cart = relationship('Cart', back_populates='lines')
    product = relationship('Product')

    def __repr__(self):
        return f"<CartLine(id={self.id}, line_uid='{self.line_uid}', product_id={self.product_id}, qty={self.qty})>"
