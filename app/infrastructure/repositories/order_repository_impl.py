"""Order repository implementation using SQLAlchemy ORM"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, update, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...domain.entities.order import Order, OrderItem
from ...domain.repositories.order_repository import IOrderRepository
from ...domain.value_objects.entity_ids import OrderId, ProductId, UserId
from ...domain.value_objects.money import Money
from ...domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from ...core.clock import utcnow
from ..orm.order_model import OrderModel, OrderItemModel


class OrderRepositoryImpl(IOrderRepository):
    """Repository implementation for Order aggregate"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, order: Order) -> Order:
        """Add a new order together with its item snapshots"""
        model = OrderModel(
            order_number=order.order_number,
            user_id=order.user_id.value,
            status=order.status,
            total_amount=order.total_amount.quantized(),
            currency=order.total_amount.currency,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            shipping_address=order.shipping_address,
            contact_phone=order.contact_phone,
            contact_email=order.contact_email,
            order_notes=order.order_notes,
            idempotency_key=order.idempotency_key,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemModel(
                    product_id=item.product_id.value if item.product_id else None,
                    product_name=item.product_name,
                    unit_price=item.unit_price.quantized(),
                    quantity=item.quantity,
                    subtotal=item.subtotal.quantized(),
                )
                for item in order.items
            ],
        )
        self.session.add(model)
        await self.session.flush()

        order.id = OrderId(model.id)
        order.items = [self._map_item(item, order.total_amount.currency) for item in model.items]
        return order

    async def get_by_id(self, order_id: OrderId, with_items: bool = False) -> Optional[Order]:
        query = select(OrderModel).where(OrderModel.id == order_id.value)
        if with_items:
            query = query.options(selectinload(OrderModel.items))
        result = await self.session.execute(query)
        model = result.scalar_one_or_none()
        return self._map_to_entity(model, with_items) if model else None

    async def get_by_user_id(self, user_id: UserId) -> List[Order]:
        """Get a user's orders, newest first"""
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id.value)
            .order_by(desc(OrderModel.created_at), desc(OrderModel.id))
        )
        return [self._map_to_entity(model) for model in result.scalars().all()]

    async def get_by_idempotency_key(self, user_id: UserId, key: str) -> Optional[Order]:
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.user_id == user_id.value, OrderModel.idempotency_key == key)
        )
        model = result.scalar_one_or_none()
        return self._map_to_entity(model, with_items=True) if model else None

    async def get_by_payment_reference(self, reference: str) -> Optional[Order]:
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.payment_reference == reference)
        )
        model = result.scalars().first()
        return self._map_to_entity(model) if model else None

    async def set_payment_reference(self, order_id: OrderId, reference: str) -> bool:
        result = await self.session.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id.value,
                OrderModel.payment_status == PaymentStatus.PENDING,
                OrderModel.status != OrderStatus.CANCELLED,
            )
            .values(payment_reference=reference, updated_at=utcnow())
        )
        return result.rowcount == 1

    async def apply_payment_result(
        self,
        reference: str,
        status: PaymentStatus,
        receipt_number: Optional[str] = None,
        paid_amount: Optional[Decimal] = None,
        payer_phone: Optional[str] = None,
        paid_at: Optional[datetime] = None,
    ) -> bool:
        if not status.is_terminal:
            raise ValueError("Payment results must be terminal")

        values = {"payment_status": status, "updated_at": utcnow()}
        if status == PaymentStatus.COMPLETED:
            values.update(
                mpesa_receipt_number=receipt_number,
                paid_amount=paid_amount,
                payer_phone=payer_phone,
                paid_at=paid_at or utcnow(),
            )

        # The only write path for payment_status: pending is the sole source state
        result = await self.session.execute(
            update(OrderModel)
            .where(
                OrderModel.payment_reference == reference,
                OrderModel.payment_status == PaymentStatus.PENDING,
            )
            .values(**values)
        )
        return result.rowcount >= 1

    async def transition_status(self, order_id: OrderId, current: OrderStatus, target: OrderStatus) -> bool:
        conditions = [OrderModel.id == order_id.value, OrderModel.status == current]
        if target == OrderStatus.CANCELLED:
            # A payment landing mid-request wins over the cancellation
            conditions.append(OrderModel.payment_status != PaymentStatus.COMPLETED)
        result = await self.session.execute(
            update(OrderModel)
            .where(*conditions)
            .values(status=target, updated_at=utcnow())
        )
        return result.rowcount == 1

    def _map_item(self, model: OrderItemModel, currency: str) -> OrderItem:
        return OrderItem(
            id=model.id,
            product_id=ProductId(model.product_id) if model.product_id else None,
            product_name=model.product_name,
            unit_price=Money.of(model.unit_price, currency),
            quantity=model.quantity,
        )

    def _map_to_entity(self, model: OrderModel, with_items: bool = False) -> Order:
        """Map ORM model to domain entity"""
        currency = model.currency or "KES"
        return Order(
            id=OrderId(model.id),
            order_number=model.order_number,
            user_id=UserId(model.user_id),
            total_amount=Money.of(model.total_amount, currency),
            payment_method=PaymentMethod(model.payment_method),
            shipping_address=model.shipping_address,
            contact_phone=model.contact_phone,
            contact_email=model.contact_email,
            order_notes=model.order_notes,
            status=OrderStatus(model.status),
            payment_status=PaymentStatus(model.payment_status),
            payment_reference=model.payment_reference,
            mpesa_receipt_number=model.mpesa_receipt_number,
            paid_amount=Decimal(str(model.paid_amount)) if model.paid_amount is not None else None,
            payer_phone=model.payer_phone,
            paid_at=model.paid_at,
            idempotency_key=model.idempotency_key,
            items=[self._map_item(item, currency) for item in model.items] if with_items else [],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
