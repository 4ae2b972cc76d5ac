"""User repository implementation"""

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.user_repository import IUserRepository
from ...domain.entities.user import User
from ...domain.value_objects.email import Email
from ...domain.value_objects.entity_ids import UserId
from ...domain.value_objects.lockout_policy import LockoutPolicy
from ...domain.enums import UserRole
from ..orm.user_model import UserModel


class UserRepositoryImpl(IUserRepository):
    """Repository implementation for User aggregate"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        model = await self.session.get(UserModel, user_id.value)
        return self._map_to_entity(model) if model else None

    async def get_by_email(self, email: Email) -> Optional[User]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == str(email))
        )
        model = result.scalar_one_or_none()
        return self._map_to_entity(model) if model else None

    async def exists_by_email(self, email: Email) -> bool:
        result = await self.session.execute(
            select(UserModel.id).where(UserModel.email == str(email))
        )
        return result.first() is not None

    async def add(self, user: User) -> User:
        """Add a new user and return it with the generated ID"""
        model = UserModel(
            email=str(user.email),
            hashed_password=user.hashed_password,
            name=user.name,
            phone=user.phone,
            location=user.location,
            role=user.role,
            email_verified=user.email_verified,
            login_attempts=user.login_attempts,
            locked_until=user.locked_until,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        user.id = UserId(model.id)
        return user

    async def update(self, user: User) -> User:
        """Persist profile fields; counters and credentials have dedicated methods"""
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user.id.value)
            .values(
                name=user.name,
                phone=user.phone,
                location=user.location,
                updated_at=user.updated_at,
            )
        )
        return user

    async def register_failed_login(
        self, user_id: UserId, policy: LockoutPolicy, now: datetime
    ) -> Tuple[int, Optional[datetime]]:
        # Increment in SQL so concurrent failures are never lost; an account
        # locked in the meantime is left alone.
        await self.session.execute(
            update(UserModel)
            .where(
                UserModel.id == user_id.value,
                or_(UserModel.locked_until.is_(None), UserModel.locked_until <= now),
            )
            .values(login_attempts=UserModel.login_attempts + 1)
        )
        result = await self.session.execute(
            select(UserModel.login_attempts, UserModel.locked_until).where(UserModel.id == user_id.value)
        )
        attempts, locked_until = result.one()

        if locked_until is not None and locked_until > now:
            return attempts, locked_until

        new_lock = policy.locked_until(attempts, now)
        if new_lock is not None:
            await self.session.execute(
                update(UserModel)
                .where(UserModel.id == user_id.value)
                .values(locked_until=new_lock)
            )
        return attempts, new_lock

    async def record_successful_login(self, user_id: UserId, now: datetime) -> None:
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id.value)
            .values(login_attempts=0, locked_until=None, last_login=now)
        )

    async def mark_email_verified(self, user_id: UserId) -> None:
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id.value)
            .values(email_verified=True)
        )

    async def set_password(self, user_id: UserId, hashed_password: str) -> None:
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id.value)
            .values(hashed_password=hashed_password, login_attempts=0, locked_until=None)
        )

    def _map_to_entity(self, model: UserModel) -> User:
        """Map ORM model to domain entity"""
        return User(
            id=UserId(model.id),
            email=Email(model.email),
            hashed_password=model.hashed_password,
            name=model.name,
            phone=model.phone,
            location=model.location,
            role=UserRole(model.role),
            email_verified=bool(model.email_verified),
            login_attempts=model.login_attempts or 0,
            locked_until=model.locked_until,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login=model.last_login,
        )
