"""Maps domain events to outbox notifications"""

from typing import Iterable

from ..domain.enums import NotificationKind
from ..domain.events.order_events import OrderPlaced, PaymentCompleted, PaymentFailed
from ..domain.events.user_events import UserRegistered, VerificationRequested, PasswordResetRequested
from ..domain.repositories.unit_of_work import IUnitOfWork


async def enqueue_notifications(uow: IUnitOfWork, events: Iterable) -> int:
    """Write one outbox row per notifiable event, inside the caller's transaction"""
    queued = 0
    for event in events:
        if isinstance(event, (UserRegistered, VerificationRequested)):
            await uow.notifications.enqueue(
                NotificationKind.EMAIL_VERIFICATION,
                str(event.email),
                {"name": event.name, "token": event.verification_token},
            )
        elif isinstance(event, PasswordResetRequested):
            await uow.notifications.enqueue(
                NotificationKind.PASSWORD_RESET,
                str(event.email),
                {"name": event.name, "token": event.reset_token},
            )
        elif isinstance(event, OrderPlaced):
            await uow.notifications.enqueue(
                NotificationKind.ORDER_CONFIRMATION,
                event.contact_email,
                {
                    "order_number": event.order_number,
                    "total": str(event.total),
                    "item_count": event.item_count,
                },
            )
        elif isinstance(event, PaymentCompleted):
            await uow.notifications.enqueue(
                NotificationKind.PAYMENT_RECEIVED,
                event.contact_email,
                {
                    "order_number": event.order_number,
                    "amount": str(event.amount),
                    "receipt_number": event.receipt_number,
                },
            )
        elif isinstance(event, PaymentFailed):
            await uow.notifications.enqueue(
                NotificationKind.PAYMENT_FAILED,
                event.contact_email,
                {"order_number": event.order_number, "reason": event.reason},
            )
        else:
            continue
        queued += 1
    return queued
