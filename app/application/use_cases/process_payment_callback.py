"""Process M-Pesa STK callback use case"""

import hmac
import logging
from typing import Any, Dict, Optional

from ...domain.enums import OrderStatus, PaymentStatus
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.mpesa_service import parse_stk_callback
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)


class ProcessPaymentCallbackUseCase:
    """Applies a Daraja callback to the order holding its CheckoutRequestID.

    Returns True when the order's payment status changed. Forged, malformed,
    stale and duplicate callbacks are logged and dropped.
    """

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.callback_token = settings.MPESA_CALLBACK_TOKEN

    async def execute(self, body: Dict[str, Any], token: Optional[str] = None) -> bool:
        if self.callback_token and not hmac.compare_digest(token or "", self.callback_token):
            logger.warning("Dropping M-Pesa callback with invalid token")
            return False

        try:
            callback = parse_stk_callback(body)
        except ValueError as e:
            logger.warning("Dropping malformed M-Pesa callback: %s", e)
            return False

        reference = callback.checkout_request_id
        status = callback.status
        logger.info("M-Pesa callback for %s: ResultCode=%s (%s)", reference, callback.result_code, status.value)

        async with self.unit_of_work:
            # Write first: the conditional update is the whole state machine
            applied = await self.unit_of_work.orders.apply_payment_result(
                reference,
                status,
                receipt_number=callback.receipt_number,
                paid_amount=callback.amount,
                payer_phone=callback.phone_number,
                paid_at=callback.transaction_date,
            )
            order = await self.unit_of_work.orders.get_by_payment_reference(reference)

            if not applied:
                if order is None:
                    logger.warning("M-Pesa callback for unknown or superseded reference %s", reference)
                else:
                    logger.info(
                        "M-Pesa callback for %s ignored; order %s already %s",
                        reference, order.order_number, order.payment_status.value,
                    )
                return False

            if status == PaymentStatus.COMPLETED and callback.amount is not None \
                    and not order.total_amount.matches(callback.amount, 1):
                logger.warning(
                    "Order %s paid %s but total is %s", order.order_number, callback.amount, order.total_amount
                )

            if status == PaymentStatus.COMPLETED and order.status == OrderStatus.CANCELLED:
                logger.warning(
                    "Order %s was cancelled but payment %s completed; refund required",
                    order.order_number, callback.receipt_number,
                )

            order.record_payment_result(status, reason=callback.result_description)
            await enqueue_notifications(self.unit_of_work, order.get_events())
            await self.unit_of_work.commit()

        logger.info("Order %s payment %s", order.order_number, status.value)
        return True
