"""User repository interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Tuple

from ..entities.user import User
from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId
from ..value_objects.lockout_policy import LockoutPolicy


class IUserRepository(ABC):

    @abstractmethod
    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: Email) -> Optional[User]:
        pass

    @abstractmethod
    async def exists_by_email(self, email: Email) -> bool:
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass

    @abstractmethod
    async def register_failed_login(
        self, user_id: UserId, policy: LockoutPolicy, now: datetime
    ) -> Tuple[int, Optional[datetime]]:
        """Atomically count a failed password check; returns (attempts, locked_until)"""
        pass

    @abstractmethod
    async def record_successful_login(self, user_id: UserId, now: datetime) -> None:
        pass

    @abstractmethod
    async def mark_email_verified(self, user_id: UserId) -> None:
        pass

    @abstractmethod
    async def set_password(self, user_id: UserId, hashed_password: str) -> None:
        """Replace the password hash and clear any lockout"""
        pass
