"""Order repository interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from ..entities.order import Order
from ..enums import OrderStatus, PaymentStatus
from ..value_objects.entity_ids import OrderId, UserId


class IOrderRepository(ABC):

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """Persist the order with its item snapshots"""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: OrderId, with_items: bool = False) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UserId) -> List[Order]:
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, user_id: UserId, key: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_payment_reference(self, reference: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def set_payment_reference(self, order_id: OrderId, reference: str) -> bool:
        """Store a new checkout reference while the payment is still pending"""
        pass

    @abstractmethod
    async def apply_payment_result(
        self,
        reference: str,
        status: PaymentStatus,
        receipt_number: Optional[str] = None,
        paid_amount: Optional[Decimal] = None,
        payer_phone: Optional[str] = None,
        paid_at: Optional[datetime] = None,
    ) -> bool:
        """Move payment_status out of pending for the order holding ``reference``.

        Returns False when no pending order holds the reference; terminal
        statuses are never overwritten.
        """
        pass

    @abstractmethod
    async def transition_status(self, order_id: OrderId, current: OrderStatus, target: OrderStatus) -> bool:
        pass
