"""Email verification use cases"""

import logging
from datetime import timedelta

from ...core.clock import utcnow
from ...core.security import generate_token
from ...domain.enums import TokenKind
from ...domain.exceptions import InvalidOrExpiredTokenError
from ...domain.value_objects.email import Email
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..notifications import enqueue_notifications

logger = logging.getLogger(__name__)


class EmailVerificationUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, token: str) -> None:
        """Consume a verification token and mark its owner verified"""
        if not token:
            raise InvalidOrExpiredTokenError()

        async with self.unit_of_work:
            user_id = await self.unit_of_work.tokens.claim(token, TokenKind.EMAIL_VERIFICATION, utcnow())
            if user_id is None:
                raise InvalidOrExpiredTokenError()

            await self.unit_of_work.users.mark_email_verified(user_id)
            await self.unit_of_work.commit()

        logger.info("Email verified for user %s", user_id)


class ResendVerificationUseCase:
    """Issues a fresh verification token; the answer never reveals whether the email exists"""

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.verification_ttl = timedelta(hours=settings.EMAIL_VERIFICATION_TTL_HOURS)

    async def execute(self, raw_email: str) -> None:
        try:
            email = Email(raw_email)
        except ValueError:
            return

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_email(email)
            if not user or user.email_verified:
                return

            token = generate_token()
            await self.unit_of_work.tokens.issue(
                user.id, TokenKind.EMAIL_VERIFICATION, token, utcnow() + self.verification_ttl
            )
            user.request_verification(token)
            await enqueue_notifications(self.unit_of_work, user.get_events())
            await self.unit_of_work.commit()
