"""Notification outbox repository interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums import NotificationKind, NotificationStatus


@dataclass
class OutboundNotification:
    id: int
    kind: NotificationKind
    recipient: str
    payload: Dict[str, Any]
    status: NotificationStatus
    attempts: int
    last_error: Optional[str] = None


class INotificationRepository(ABC):

    @abstractmethod
    async def enqueue(self, kind: NotificationKind, recipient: str, payload: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def claim_batch(self, limit: int, now: datetime, stale_before: datetime) -> List[OutboundNotification]:
        pass

    @abstractmethod
    async def mark_sent(self, notification_id: int, now: datetime) -> None:
        pass

    @abstractmethod
    async def mark_failed(self, notification_id: int, error: str, give_up: bool) -> None:
        pass
