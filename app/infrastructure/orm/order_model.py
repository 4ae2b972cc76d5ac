"""Order ORM Models"""

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from .columns import enum_column


class OrderModel(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    # Order details
    status = Column(enum_column(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(8), default='KES', nullable=False)

    # Payment details (M-Pesa)
    payment_method = Column(enum_column(PaymentMethod), nullable=False)
    payment_status = Column(enum_column(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    payment_reference = Column(String(128), nullable=True, index=True)
    mpesa_receipt_number = Column(String(64), nullable=True)
    paid_amount = Column(Numeric(12, 2), nullable=True)
    payer_phone = Column(String(32), nullable=True)
    paid_at = Column(DateTime, nullable=True)

    # Shipping / contact snapshot
    shipping_address = Column(Text, nullable=False)
    contact_phone = Column(String(32), nullable=False)
    contact_email = Column(String(255), nullable=False)
    order_notes = Column(Text, nullable=True)

    idempotency_key = Column(String(128), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'idempotency_key', name='uq_orders_user_idempotency_key'),
    )

    # Relationships
    user = relationship('UserModel', back_populates='orders')
    items = relationship('OrderItemModel', back_populates='order', cascade='all, delete-orphan',
                         order_by='OrderItemModel.id')


class OrderItemModel(Base):
    __tablename__ = 'order_items'

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    product_name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    order = relationship('OrderModel', back_populates='items')
