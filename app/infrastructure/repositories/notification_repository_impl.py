"""Notification outbox repository implementation"""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.notification_repository import INotificationRepository, OutboundNotification
from ...domain.enums import NotificationKind, NotificationStatus
from ..orm.notification_model import NotificationModel


class NotificationRepositoryImpl(INotificationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def enqueue(self, kind: NotificationKind, recipient: str, payload: Dict[str, Any]) -> None:
        self.session.add(NotificationModel(
            kind=kind,
            recipient=recipient,
            payload=json.dumps(payload, default=str),
            status=NotificationStatus.PENDING,
            attempts=0,
        ))
        await self.session.flush()

    async def claim_batch(self, limit: int, now: datetime, stale_before: datetime) -> List[OutboundNotification]:
        """Move up to ``limit`` deliverable rows to ``sending`` and return them.

        Rows stuck in ``sending`` since before ``stale_before`` belong to a
        dispatcher that died mid-batch and are claimed again.
        """
        claimable = or_(
            NotificationModel.status == NotificationStatus.PENDING,
            and_(
                NotificationModel.status == NotificationStatus.SENDING,
                NotificationModel.locked_at < stale_before,
            ),
        )
        candidates = (
            select(NotificationModel.id)
            .where(claimable)
            .order_by(NotificationModel.id)
            .limit(limit)
        )
        claim_id = uuid.uuid4().hex

        await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id.in_(candidates), claimable)
            .values(
                status=NotificationStatus.SENDING,
                locked_at=now,
                claimed_by=claim_id,
                attempts=NotificationModel.attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            select(NotificationModel)
            .where(
                NotificationModel.claimed_by == claim_id,
                NotificationModel.status == NotificationStatus.SENDING,
            )
            .order_by(NotificationModel.id)
        )
        return [self._map_to_entity(model) for model in result.scalars().all()]

    async def mark_sent(self, notification_id: int, now: datetime) -> None:
        await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .values(status=NotificationStatus.SENT, sent_at=now, last_error=None)
        )

    async def mark_failed(self, notification_id: int, error: str, give_up: bool) -> None:
        await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .values(
                status=NotificationStatus.FAILED if give_up else NotificationStatus.PENDING,
                last_error=error[:1000],
                locked_at=None,
                claimed_by=None,
            )
        )

    def _map_to_entity(self, model: NotificationModel) -> OutboundNotification:
        return OutboundNotification(
            id=model.id,
            kind=NotificationKind(model.kind),
            recipient=model.recipient,
            payload=json.loads(model.payload),
            status=NotificationStatus(model.status),
            attempts=model.attempts,
            last_error=model.last_error,
        )
