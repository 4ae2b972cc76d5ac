"""Reset password use case"""

import logging

from ...core.clock import utcnow
from ...core.security import get_password_hash
from ...domain.enums import TokenKind
from ...domain.exceptions import InvalidOrExpiredTokenError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import ResetPasswordDto

logger = logging.getLogger(__name__)


class ResetPasswordUseCase:
    """Use case for resetting password with token"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: ResetPasswordDto) -> None:
        hashed_password = get_password_hash(request.password)

        async with self.unit_of_work:
            # Claiming and applying happen in one transaction
            user_id = await self.unit_of_work.tokens.claim(request.token, TokenKind.PASSWORD_RESET, utcnow())
            if user_id is None:
                raise InvalidOrExpiredTokenError()

            await self.unit_of_work.users.set_password(user_id, hashed_password)
            await self.unit_of_work.commit()

        logger.info("Password reset for user %s", user_id)
