"""Order entity with business logic"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Sequence

from ..value_objects.money import Money
from ..value_objects.entity_ids import OrderId, ProductId, UserId
from ..enums import OrderStatus, PaymentMethod, PaymentStatus
from ..events.order_events import OrderPlaced, OrderCancelled, PaymentCompleted, PaymentFailed
from ..exceptions import EmptyCartError, IllegalTransitionError, ValidationError
from .cart import CartLine
from ...core.clock import utcnow

# Crockford-style alphabet without look-alike characters
_SUFFIX_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_SUFFIX_LENGTH = 8


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Human-readable public order identifier: timestamp plus random suffix"""
    now = now or utcnow()
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"ORD-{now:%Y%m%d%H%M%S}-{suffix}"


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a cart line at checkout time"""
    product_id: Optional[ProductId]
    product_name: str
    unit_price: Money
    quantity: int
    id: Optional[int] = None

    @property
    def subtotal(self) -> Money:
        return self.unit_price.times(self.quantity)

    @classmethod
    def snapshot(cls, line: CartLine) -> "OrderItem":
        return cls(
            product_id=line.product_id,
            product_name=line.product_name,
            unit_price=line.unit_price,
            quantity=line.quantity,
        )


@dataclass
class Order:
    id: Optional[OrderId]
    order_number: str
    user_id: UserId
    total_amount: Money
    payment_method: PaymentMethod
    shipping_address: str
    contact_phone: str
    contact_email: str
    order_notes: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING

    # Payment provider fields
    payment_reference: Optional[str] = None
    mpesa_receipt_number: Optional[str] = None
    paid_amount: Optional[Decimal] = None
    payer_phone: Optional[str] = None
    paid_at: Optional[datetime] = None

    idempotency_key: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Domain events
    _events: List = field(default_factory=list, init=False, repr=False)

    @classmethod
    def place(
        cls,
        user_id: UserId,
        lines: Sequence[CartLine],
        payment_method: Optional[PaymentMethod],
        shipping_address: Optional[str],
        contact_phone: Optional[str],
        contact_email: Optional[str],
        order_notes: Optional[str] = None,
        idempotency_key: Optional[str] = None,
        currency: str = "KES",
    ) -> "Order":
        """Business logic: snapshot the cart into a new pending order"""
        if not lines:
            raise EmptyCartError()

        missing = [
            name for name, value in (
                ("paymentMethod", payment_method),
                ("shippingAddress", shipping_address),
                ("contactPhone", contact_phone),
                ("contactEmail", contact_email),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise ValidationError(
                "Missing required checkout fields",
                details={"errors": [f"{name} is required" for name in missing]},
            )

        unavailable = [line.product_name for line in lines if not line.available]
        if unavailable:
            raise ValidationError(
                "Some items are no longer available",
                details={"errors": [f"{name} is unavailable" for name in unavailable]},
            )

        items = [OrderItem.snapshot(line) for line in lines]
        total = Money.zero(currency)
        for item in items:
            total = total + item.subtotal

        return cls(
            id=None,
            order_number=generate_order_number(),
            user_id=user_id,
            total_amount=total,
            payment_method=payment_method,
            shipping_address=shipping_address.strip(),
            contact_phone=contact_phone.strip(),
            contact_email=contact_email.strip(),
            order_notes=order_notes,
            idempotency_key=idempotency_key,
            items=items,
        )

    def record_placed(self) -> None:
        """Emit OrderPlaced once persistence has assigned an id"""
        self._events.append(OrderPlaced(
            order_id=self.id,
            user_id=self.user_id,
            order_number=self.order_number,
            total=self.total_amount,
            contact_email=self.contact_email,
            item_count=sum(item.quantity for item in self.items),
        ))

    def ensure_can_transition(self, target: OrderStatus) -> None:
        if not self.status.can_transition_to(target):
            raise IllegalTransitionError(
                f"Cannot move order from {self.status.value} to {target.value}"
            )

    def cancel(self) -> None:
        """Business logic: customer cancellation, only while pending"""
        if self.status != OrderStatus.PENDING:
            raise IllegalTransitionError("Only pending orders can be cancelled")
        if self.is_paid:
            raise IllegalTransitionError("Paid orders cannot be cancelled")
        self.status = OrderStatus.CANCELLED
        self.updated_at = utcnow()
        self._events.append(OrderCancelled(
            order_id=self.id,
            user_id=self.user_id,
            order_number=self.order_number,
        ))

    def record_payment_result(self, status: PaymentStatus, reason: Optional[str] = None) -> None:
        """Emit the event for a payment result that was just persisted"""
        if status == PaymentStatus.COMPLETED:
            self._events.append(PaymentCompleted(
                order_id=self.id,
                order_number=self.order_number,
                contact_email=self.contact_email,
                receipt_number=self.mpesa_receipt_number,
                amount=Money.of(self.paid_amount, self.total_amount.currency)
                if self.paid_amount is not None else self.total_amount,
            ))
        elif status == PaymentStatus.FAILED:
            self._events.append(PaymentFailed(
                order_id=self.id,
                order_number=self.order_number,
                contact_email=self.contact_email,
                reason=reason or "Payment failed",
            ))

    def is_owned_by(self, user_id: UserId) -> bool:
        return self.user_id == user_id

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events
