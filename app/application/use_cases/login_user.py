"""Login user use case"""

import logging

from ...core.clock import utcnow
from ...core.security import verify_password, create_access_token
from ...domain.exceptions import AccountLockedError, EmailNotVerifiedError, ValidationError
from ...domain.value_objects.email import Email
from ...domain.value_objects.lockout_policy import LockoutPolicy
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import LoginUserDto, LoginResponse, UserDto

logger = logging.getLogger(__name__)


def _invalid_credentials() -> ValidationError:
    return ValidationError("Invalid credentials", code="invalid_credentials")


class LoginUserUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.settings = settings
        self.policy = LockoutPolicy.from_settings(settings)

    async def execute(self, request: LoginUserDto) -> LoginResponse:
        try:
            email = Email(request.email)
        except ValueError:
            raise _invalid_credentials()

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_email(email)
            if not user:
                raise _invalid_credentials()

            now = utcnow()
            # A locked account is refused before the password is even looked at
            if user.is_locked(now):
                raise AccountLockedError(user.lock_remaining_seconds(now))

            if not verify_password(request.password, user.hashed_password):
                attempts, locked_until = await self.unit_of_work.users.register_failed_login(
                    user.id, self.policy, now
                )
                await self.unit_of_work.commit()
                logger.warning("Failed login for user %s (attempt %s)", user.id, attempts)
                if locked_until is not None and locked_until > now:
                    raise AccountLockedError(int((locked_until - now).total_seconds()))
                raise _invalid_credentials()

            if not user.email_verified:
                raise EmailNotVerifiedError()

            await self.unit_of_work.users.record_successful_login(user.id, now)
            await self.unit_of_work.commit()

        user.login_attempts = 0
        user.locked_until = None
        user.last_login = now
        return LoginResponse(
            token=create_access_token(str(user.id.value), self.settings),
            user=UserDto.from_entity(user),
        )
