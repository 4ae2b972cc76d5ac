"""Forgot password use case"""

import logging
from datetime import timedelta

from ...core.clock import utcnow
from ...core.security import generate_token
from ...domain.enums import TokenKind
from ...domain.value_objects.email import Email
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "If an account exists for that email, a password reset link has been sent."


class ForgotPasswordUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.reset_ttl = timedelta(hours=settings.PASSWORD_RESET_TTL_HOURS)

    async def execute(self, raw_email: str) -> str:
        try:
            email = Email(raw_email)
        except ValueError:
            return GENERIC_MESSAGE

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_email(email)
            if not user:
                logger.info("Password reset requested for unknown email")
                return GENERIC_MESSAGE

            token = generate_token()
            await self.unit_of_work.tokens.issue(
                user.id, TokenKind.PASSWORD_RESET, token, utcnow() + self.reset_ttl
            )
            user.request_password_reset(token)
            await enqueue_notifications(self.unit_of_work, user.get_events())
            await self.unit_of_work.commit()

        return GENERIC_MESSAGE
