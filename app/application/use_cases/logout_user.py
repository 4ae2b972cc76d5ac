"""Logout use case: revokes the presented access token"""

from datetime import datetime, timezone

from ...core.security import decode_access_token
from ...domain.repositories.unit_of_work import IUnitOfWork


class LogoutUserUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, settings):
        self.unit_of_work = unit_of_work
        self.settings = settings

    async def execute(self, token: str) -> None:
        claims = decode_access_token(token, self.settings)
        if not claims:
            return

        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(tzinfo=None)
        async with self.unit_of_work:
            await self.unit_of_work.tokens.revoke_session(claims["jti"], expires_at)
            await self.unit_of_work.commit()
