"""Register user use case"""

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from ...core.clock import utcnow
from ...core.security import get_password_hash, generate_token
from ...domain.entities.user import User
from ...domain.enums import TokenKind
from ...domain.exceptions import ConflictError
from ...domain.value_objects.email import Email
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import RegisterUserDto, RegisterResponse
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)


class RegisterUserUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.verification_ttl = timedelta(hours=settings.EMAIL_VERIFICATION_TTL_HOURS)

    async def execute(self, request: RegisterUserDto) -> RegisterResponse:
        email = Email(request.email)

        async with self.unit_of_work:
            if await self.unit_of_work.users.exists_by_email(email):
                raise ConflictError("An account with this email already exists", code="email_taken")

            user = User.register(
                email=email,
                hashed_password=get_password_hash(request.password),
                name=request.name,
                phone=request.phone,
                location=request.location,
            )
            try:
                user = await self.unit_of_work.users.add(user)
            except IntegrityError as e:
                # Lost a race with a concurrent registration for the same address
                raise ConflictError("An account with this email already exists", code="email_taken") from e

            token = generate_token()
            await self.unit_of_work.tokens.issue(
                user.id, TokenKind.EMAIL_VERIFICATION, token, utcnow() + self.verification_ttl
            )
            user.record_registration(token)
            queued = await enqueue_notifications(self.unit_of_work, user.get_events())
            await self.unit_of_work.commit()

        logger.info("Registered user %s", user.id)
        return RegisterResponse(
            message="Registration successful. Please check your email to verify your account.",
            user_id=user.id.value,
            email_sent=queued > 0,
        )
