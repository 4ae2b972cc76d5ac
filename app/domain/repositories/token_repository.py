"""Single-use token repository interface (verification, password reset, revoked sessions)"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..enums import TokenKind
from ..value_objects.entity_ids import UserId


class ITokenRepository(ABC):

    @abstractmethod
    async def issue(self, user_id: UserId, kind: TokenKind, token: str, expires_at: datetime) -> None:
        """Store a new token; older outstanding tokens of the same kind stop being valid"""
        pass

    @abstractmethod
    async def claim(self, token: str, kind: TokenKind, now: datetime) -> Optional[UserId]:
        """Mark the token used iff it is unused and unexpired; returns its owner on success"""
        pass

    @abstractmethod
    async def revoke_session(self, jti: str, expires_at: datetime) -> None:
        pass

    @abstractmethod
    async def is_session_revoked(self, jti: str) -> bool:
        pass
