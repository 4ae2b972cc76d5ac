"""Product ORM Model"""

from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime, CheckConstraint
from sqlalchemy.sql import func

from ...db.models import Base


class ProductModel(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    location = Column(String(255), nullable=True, index=True)
    image = Column(String(500), nullable=True)
    available = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )
