"""Order domain events"""

from dataclasses import dataclass
from typing import Optional

from ..value_objects.money import Money
from ..value_objects.entity_ids import OrderId, UserId


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    user_id: UserId
    order_number: str
    total: Money
    contact_email: str
    item_count: int


@dataclass(frozen=True)
class OrderCancelled:
    order_id: OrderId
    user_id: UserId
    order_number: str


@dataclass(frozen=True)
class PaymentCompleted:
    order_id: OrderId
    order_number: str
    contact_email: str
    receipt_number: Optional[str]
    amount: Money


@dataclass(frozen=True)
class PaymentFailed:
    order_id: OrderId
    order_number: str
    contact_email: str
    reason: str
