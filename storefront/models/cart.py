"""Cart model - persistent cart per shopper."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base, BigIntPK


class Cart(Base):
    """
    Cart - one per shopper.

    ``shopper_key`` is the stable identifier kept in the browser session
    (see ``storefront.middleware``). Lines are owned by the cart and only
    rewritten through ``cart_service``.
    """

    __tablename__ = 'cart'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shopper_key = Column(String(64), nullable=False, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    lines = relationship('CartLine', back_populates='cart', cascade='all, delete-orphan',
                         order_by='CartLine.id')

    def __repr__(self):
        return f"<Cart(id={self.id}, shopper_key='{self.shopper_key}')>"
