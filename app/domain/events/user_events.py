"""User domain events"""

from dataclasses import dataclass

from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId


@dataclass(frozen=True)
class UserRegistered:
    user_id: UserId
    email: Email
    name: str
    verification_token: str


@dataclass(frozen=True)
class VerificationRequested:
    user_id: UserId
    email: Email
    name: str
    verification_token: str


@dataclass(frozen=True)
class PasswordResetRequested:
    user_id: UserId
    email: Email
    name: str
    reset_token: str
