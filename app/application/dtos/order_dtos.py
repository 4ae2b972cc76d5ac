"""Order DTOs for API requests and responses"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ...domain.enums import OrderStatus, PaymentMethod
from .base import CamelModel


class CreateOrderDto(CamelModel):
    """Checkout request; completeness is checked by the order itself"""
    payment_method: Optional[PaymentMethod] = None
    shipping_address: Optional[str] = Field(None, max_length=2000)
    contact_phone: Optional[str] = Field(None, max_length=32)
    contact_email: Optional[str] = Field(None, max_length=255)
    order_notes: Optional[str] = Field(None, max_length=2000)


class OrderCreatedResponse(CamelModel):
    message: str = "Order created successfully"
    order_id: int
    order_number: str
    total_amount: float
    status: str
    payment_status: str


class OrderItemDto(CamelModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    product_name: str
    unit_price: float
    quantity: int
    subtotal: float


class OrderDto(CamelModel):
    """Response DTO for order data"""
    id: int
    order_number: str
    status: str
    total_amount: float
    currency: str
    payment_method: str
    payment_status: str
    payment_reference: Optional[str] = None
    mpesa_receipt_number: Optional[str] = None
    shipping_address: str
    contact_phone: str
    contact_email: str
    order_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    items: List[OrderItemDto] = []

    @classmethod
    def from_entity(cls, order) -> "OrderDto":
        """Convert domain entity to DTO"""
        return cls(
            id=order.id.value,
            order_number=order.order_number,
            status=order.status.value,
            total_amount=float(order.total_amount.amount),
            currency=order.total_amount.currency,
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            payment_reference=order.payment_reference,
            mpesa_receipt_number=order.mpesa_receipt_number,
            shipping_address=order.shipping_address,
            contact_phone=order.contact_phone,
            contact_email=order.contact_email,
            order_notes=order.order_notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            paid_at=order.paid_at,
            items=[
                OrderItemDto(
                    id=item.id,
                    product_id=item.product_id.value if item.product_id else None,
                    product_name=item.product_name,
                    unit_price=float(item.unit_price.amount),
                    quantity=item.quantity,
                    subtotal=float(item.subtotal.amount),
                )
                for item in order.items
            ],
        )


class UpdateOrderStatusDto(CamelModel):
    status: OrderStatus
