"""Product Variant model."""
from sqlalchemy import Column, BigInteger, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from storefront.database import Base, BigIntPK


class ProductVariant(Base):
    """One (color, size) combination of a product with its own stock count."""

    __tablename__ = 'product_variant'
    __table_args__ = (
        UniqueConstraint('product_id', 'color', 'size', name='uq_product_variant_color_size'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    color = Column(String(50), nullable=False, default='')  # '' when the product has no color axis
    size = Column(String(20), nullable=False, default='')
    sku = Column(String(40), nullable=True)
    barcode = Column(String(64), nullable=True)
    stock = Column(Integer, nullable=False, default=0, server_default='0')

    # Relationships
    product = relationship('Product', back_populates='variants')

    def __repr__(self):
        return f"<ProductVariant(id={self.id}, color='{self.color}', size='{self.size}', stock={self.stock})>"
