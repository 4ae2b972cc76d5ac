"""Single-use token repository implementation"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.token_repository import ITokenRepository
from ...domain.value_objects.entity_ids import UserId
from ...domain.enums import TokenKind
from ..orm.token_model import UserTokenModel, RevokedTokenModel


class TokenRepositoryImpl(ITokenRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def issue(self, user_id: UserId, kind: TokenKind, token: str, expires_at: datetime) -> None:
        # Latest wins: retire whatever is still outstanding for this kind
        await self.session.execute(
            update(UserTokenModel)
            .where(
                UserTokenModel.user_id == user_id.value,
                UserTokenModel.kind == kind,
                UserTokenModel.used.is_(False),
            )
            .values(used=True)
        )
        self.session.add(UserTokenModel(
            user_id=user_id.value,
            kind=kind,
            token=token,
            expires_at=expires_at,
            used=False,
        ))
        await self.session.flush()

    async def claim(self, token: str, kind: TokenKind, now: datetime) -> Optional[UserId]:
        result = await self.session.execute(
            update(UserTokenModel)
            .where(
                UserTokenModel.token == token,
                UserTokenModel.kind == kind,
                UserTokenModel.used.is_(False),
                UserTokenModel.expires_at > now,
            )
            .values(used=True, used_at=now)
        )
        if result.rowcount != 1:
            return None

        owner = await self.session.execute(
            select(UserTokenModel.user_id).where(UserTokenModel.token == token)
        )
        return UserId(owner.scalar_one())

    async def revoke_session(self, jti: str, expires_at: datetime) -> None:
        if await self.is_session_revoked(jti):
            return
        self.session.add(RevokedTokenModel(jti=jti, expires_at=expires_at))
        await self.session.flush()

    async def is_session_revoked(self, jti: str) -> bool:
        result = await self.session.execute(
            select(RevokedTokenModel.id).where(RevokedTokenModel.jti == jti)
        )
        return result.first() is not None
