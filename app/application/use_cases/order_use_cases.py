"""Order query and status use cases"""

import logging
from typing import List

from ...domain.entities.order import Order
from ...domain.entities.user import User
from ...domain.enums import OrderStatus
from ...domain.exceptions import ConflictError, NotFoundError
from ...domain.value_objects.entity_ids import OrderId, UserId
from ...domain.repositories.unit_of_work import IUnitOfWork

logger = logging.getLogger(__name__)


class ListOrdersUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId) -> List[Order]:
        async with self.unit_of_work:
            return await self.unit_of_work.orders.get_by_user_id(user_id)


class GetOrderUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user: User, order_id: int) -> Order:
        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(order_id), with_items=True)
        # Other users' orders are indistinguishable from missing ones
        if not order or not (order.is_owned_by(user.id) or user.is_admin):
            raise NotFoundError("Order not found")
        return order


class CancelOrderUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId, order_id: int) -> Order:
        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(order_id), with_items=True)
            if not order or not order.is_owned_by(user_id):
                raise NotFoundError("Order not found")

            previous = order.status
            order.cancel()
            if not await self.unit_of_work.orders.transition_status(order.id, previous, order.status):
                raise ConflictError("Order was modified concurrently. Please retry.")

            await self.unit_of_work.commit()

        logger.info("Order %s cancelled by user %s", order.order_number, user_id)
        return order


class UpdateOrderStatusUseCase:
    """Admin fulfillment workflow"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, order_id: int, target: OrderStatus) -> Order:
        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(order_id), with_items=True)
            if not order:
                raise NotFoundError("Order not found")

            order.ensure_can_transition(target)
            if not await self.unit_of_work.orders.transition_status(order.id, order.status, target):
                raise ConflictError("Order was modified concurrently. Please retry.")
            await self.unit_of_work.commit()

        logger.info("Order %s moved from %s to %s", order.order_number, order.status.value, target.value)
        order.status = target
        return order
