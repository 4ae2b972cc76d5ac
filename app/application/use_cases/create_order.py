"""Create Order Use Case"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ...domain.entities.order import Order
from ...domain.exceptions import ConflictError
from ...domain.value_objects.entity_ids import UserId
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.order_dtos import CreateOrderDto
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)


class CreateOrderUseCase:
    """Checkout: snapshots the cart into an order and empties the cart in one transaction"""

    def __init__(self, unit_of_work: IUnitOfWork, currency: str = "KES"):
        self.unit_of_work = unit_of_work
        self.currency = currency

    async def execute(self, user_id: UserId, request: CreateOrderDto,
                      idempotency_key: Optional[str] = None) -> Tuple[Order, bool]:
        """Returns the order and whether it was created by this call"""
        try:
            return await self._place(user_id, request, idempotency_key)
        except IntegrityError:
            if not idempotency_key:
                raise
            # Lost a race with a concurrent request carrying the same key
            async with self.unit_of_work:
                existing = await self.unit_of_work.orders.get_by_idempotency_key(user_id, idempotency_key)
            if existing is None:
                raise
            return existing, False

    async def _place(self, user_id: UserId, request: CreateOrderDto,
                     idempotency_key: Optional[str]) -> Tuple[Order, bool]:
        async with self.unit_of_work:
            if idempotency_key:
                existing = await self.unit_of_work.orders.get_by_idempotency_key(user_id, idempotency_key)
                if existing:
                    logger.info("Replaying order %s for idempotency key", existing.order_number)
                    return existing, False

            lines = await self.unit_of_work.carts.get_lines(user_id)
            order = Order.place(
                user_id=user_id,
                lines=lines,
                payment_method=request.payment_method,
                shipping_address=request.shipping_address,
                contact_phone=request.contact_phone,
                contact_email=request.contact_email,
                order_notes=request.order_notes,
                idempotency_key=idempotency_key,
                currency=self.currency,
            )
            order = await self.unit_of_work.orders.add(order)

            removed = await self.unit_of_work.carts.remove_lines(user_id, [line.id for line in lines])
            if removed != len(lines):
                raise ConflictError("Your cart changed during checkout. Please review it and try again.")

            order.record_placed()
            await enqueue_notifications(self.unit_of_work, order.get_events())
            await self.unit_of_work.commit()

        logger.info("Order %s created for user %s: %s", order.order_number, user_id, order.total_amount)
        return order, True
