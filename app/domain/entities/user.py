"""User entity with business logic"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId
from ..enums import UserRole
from ..events.user_events import UserRegistered, VerificationRequested, PasswordResetRequested
from ...core.clock import utcnow


@dataclass
class User:
    id: Optional[UserId]
    email: Email
    hashed_password: str
    name: str
    phone: Optional[str] = None
    location: Optional[str] = None
    role: UserRole = UserRole.USER
    email_verified: bool = False

    # Lockout bookkeeping
    login_attempts: int = 0
    locked_until: Optional[datetime] = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_login: Optional[datetime] = None

    # Domain events
    _events: List = field(default_factory=list, init=False, repr=False)

    @classmethod
    def register(
        cls,
        email: Email,
        hashed_password: str,
        name: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
    ) -> 'User':
        """Factory method to create a new, unverified user"""
        return cls(
            id=None,
            email=email,
            hashed_password=hashed_password,
            name=name.strip(),
            phone=phone,
            location=location,
        )

    def record_registration(self, verification_token: str) -> None:
        """Emit the registration event once the user has an id and a token"""
        self._events.append(UserRegistered(
            user_id=self.id,
            email=self.email,
            name=self.name,
            verification_token=verification_token,
        ))

    def request_verification(self, verification_token: str) -> None:
        if self.email_verified:
            return
        self._events.append(VerificationRequested(
            user_id=self.id,
            email=self.email,
            name=self.name,
            verification_token=verification_token,
        ))

    def request_password_reset(self, reset_token: str) -> None:
        self._events.append(PasswordResetRequested(
            user_id=self.id,
            email=self.email,
            name=self.name,
            reset_token=reset_token,
        ))

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def lock_remaining_seconds(self, now: datetime) -> int:
        if not self.is_locked(now):
            return 0
        return int((self.locked_until - now).total_seconds()) + 1

    def update_profile(self, name: Optional[str] = None, phone: Optional[str] = None,
                       location: Optional[str] = None) -> None:
        if name is not None:
            if not name.strip():
                raise ValueError("Name cannot be empty")
            self.name = name.strip()
        if phone is not None:
            self.phone = phone
        if location is not None:
            self.location = location
        self.updated_at = utcnow()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events
