import asyncio
import logging

from .celery_app import celery_app
from .core.config import get_settings
from .db.database import Database
from .infrastructure.external_services.email_service import EmailService
from .infrastructure.external_services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


async def _drain_outbox() -> int:
    settings = get_settings()
    database = Database(settings)
    try:
        dispatcher = NotificationDispatcher(database.session_factory, EmailService(settings), settings)
        return await dispatcher.dispatch_pending()
    finally:
        await database.dispose()


@celery_app.task(bind=True, max_retries=3)
def dispatch_notifications(self):
    """Periodic sweep of the notification outbox (crash recovery and retries)."""
    try:
        delivered = asyncio.run(_drain_outbox())
    except Exception as exc:
        logger.error(f"Error dispatching notifications: {exc}")
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    if delivered:
        logger.info(f"Dispatched {delivered} notification(s)")
    return delivered
