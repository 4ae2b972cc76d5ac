"""Outbox dispatcher: delivers queued notifications by email"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import async_sessionmaker

from ...core.clock import utcnow
from ..repositories.unit_of_work_impl import UnitOfWorkImpl
from .email_service import EmailService

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Drains the notifications table with at-least-once delivery.

    Each batch is claimed in its own short transaction, sent outside of any
    transaction, and its outcome recorded per row. Rows left in ``sending``
    by a crashed worker are reclaimed once the claim timeout passes.
    """

    def __init__(self, session_factory: async_sessionmaker, email_service: EmailService, settings):
        self.session_factory = session_factory
        self.email_service = email_service
        self.max_attempts = settings.NOTIFICATION_MAX_ATTEMPTS
        self.batch_size = settings.NOTIFICATION_BATCH_SIZE
        self.claim_timeout = timedelta(minutes=settings.NOTIFICATION_CLAIM_TIMEOUT_MINUTES)

    async def dispatch_pending(self, max_batches: int = 10) -> int:
        """Send what is due; returns the number of notifications delivered"""
        delivered = 0
        for _ in range(max_batches):
            async with self.session_factory() as session:
                async with UnitOfWorkImpl(session) as uow:
                    now = utcnow()
                    batch = await uow.notifications.claim_batch(
                        self.batch_size, now, now - self.claim_timeout
                    )
            if not batch:
                break

            for notification in batch:
                try:
                    await self.email_service.send_notification(
                        notification.kind, notification.recipient, notification.payload
                    )
                except Exception as e:
                    # Delivery errors stay on the row; the next run retries them
                    give_up = notification.attempts >= self.max_attempts
                    logger.warning(
                        "Notification %s (%s) attempt %s failed%s: %s",
                        notification.id, notification.kind.value, notification.attempts,
                        ", giving up" if give_up else "", e,
                    )
                    await self._record(notification.id, error=str(e) or e.__class__.__name__, give_up=give_up)
                else:
                    delivered += 1
                    await self._record(notification.id)

            if len(batch) < self.batch_size:
                break
        return delivered

    async def _record(self, notification_id: int, error: str = None, give_up: bool = False) -> None:
        async with self.session_factory() as session:
            async with UnitOfWorkImpl(session) as uow:
                if error is None:
                    await uow.notifications.mark_sent(notification_id, utcnow())
                else:
                    await uow.notifications.mark_failed(notification_id, error, give_up)

    async def dispatch_safely(self) -> None:
        """Entry point for post-response background tasks; errors never reach the client"""
        try:
            delivered = await self.dispatch_pending()
        except Exception:
            logger.exception("Notification dispatch failed; the periodic task will retry")
            return
        if delivered:
            logger.info("Delivered %s notification(s)", delivered)
