"""M-Pesa payment use cases: STK push initiation and status polling"""

import logging

from ...core.clock import utcnow
from ...domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from ...domain.exceptions import (
    AmountMismatchError,
    NotFoundError,
    PaymentNotPendingError,
    ValidationError,
)
from ...domain.value_objects.entity_ids import OrderId, UserId
from ...domain.value_objects.phone import PhoneNumber
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.mpesa_service import MpesaService
from ..dtos.payment_dtos import (
    StkPushRequestDto,
    StkPushResponse,
    StkQueryRequestDto,
    StkQueryResponse,
)
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)


class InitiatePaymentUseCase:
    """Sends an STK push for one of the caller's pending M-Pesa orders"""

    def __init__(self, unit_of_work: IUnitOfWork, mpesa_service: MpesaService, settings):
        self.unit_of_work = unit_of_work
        self.mpesa_service = mpesa_service
        self.tolerance = settings.PAYMENT_AMOUNT_TOLERANCE

    async def execute(self, user_id: UserId, request: StkPushRequestDto) -> StkPushResponse:
        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(request.order_id))
        if not order or not order.is_owned_by(user_id):
            raise NotFoundError("Order not found")

        if order.payment_method != PaymentMethod.MPESA:
            raise ValidationError("This order is not payable by M-Pesa")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("This order has been cancelled")
        if order.payment_status != PaymentStatus.PENDING:
            raise PaymentNotPendingError(f"Payment for this order is already {order.payment_status.value}")
        if not order.total_amount.matches(request.amount, self.tolerance):
            raise AmountMismatchError(
                "Payment amount does not match the order total",
                details={"expectedAmount": float(order.total_amount.quantized())},
            )

        phone = PhoneNumber.parse(request.phone_number)

        # No transaction is open while the provider is being called
        result = await self.mpesa_service.request_payment(
            phone=phone.value,
            amount=order.total_amount.whole_units(),
            reference=order.order_number,
            description=f"Order {order.order_number}",
        )

        async with self.unit_of_work:
            stored = await self.unit_of_work.orders.set_payment_reference(order.id, result.checkout_request_id)
            if not stored:
                raise PaymentNotPendingError("Payment for this order is no longer pending")
            await self.unit_of_work.commit()

        logger.info("STK push %s sent for order %s", result.checkout_request_id, order.order_number)
        return StkPushResponse(
            checkout_request_id=result.checkout_request_id,
            merchant_request_id=result.merchant_request_id,
            customer_message=result.customer_message,
        )


class QueryPaymentStatusUseCase:
    """Caller-driven poll; only a completed result is written back"""

    def __init__(self, unit_of_work: IUnitOfWork, mpesa_service: MpesaService):
        self.unit_of_work = unit_of_work
        self.mpesa_service = mpesa_service

    async def execute(self, user_id: UserId, request: StkQueryRequestDto) -> StkQueryResponse:
        reference = request.checkout_request_id

        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_payment_reference(reference)
        if not order or not order.is_owned_by(user_id):
            raise NotFoundError("Payment request not found")

        if order.payment_status.is_terminal:
            return StkQueryResponse(
                status=order.payment_status.value,
                payment_status=order.payment_status.value,
            )

        result = await self.mpesa_service.query_payment(reference)

        if result.status == PaymentStatus.COMPLETED:
            async with self.unit_of_work:
                applied = await self.unit_of_work.orders.apply_payment_result(
                    reference, PaymentStatus.COMPLETED, paid_at=utcnow()
                )
                if applied:
                    order = await self.unit_of_work.orders.get_by_payment_reference(reference)
                    order.record_payment_result(PaymentStatus.COMPLETED)
                    await enqueue_notifications(self.unit_of_work, order.get_events())
                    logger.info("Payment for order %s completed via status query", order.order_number)
                await self.unit_of_work.commit()

        async with self.unit_of_work:
            current = await self.unit_of_work.orders.get_by_payment_reference(reference)

        # A callback may have landed first; the stored status wins once terminal
        status = current.payment_status if current and current.payment_status.is_terminal else result.status
        return StkQueryResponse(
            status=status.value,
            payment_status=current.payment_status.value if current else order.payment_status.value,
            result_code=result.result_code,
            result_description=result.result_description,
        )
