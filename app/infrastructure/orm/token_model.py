"""Single-use token ORM models"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import TokenKind
from .columns import enum_column


class UserTokenModel(Base):
    """Email verification and password reset tokens"""

    __tablename__ = "user_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(enum_column(TokenKind), nullable=False)
    token = Column(String(255), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    used_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_user_tokens_user_kind_used', 'user_id', 'kind', 'used'),
    )

    def __repr__(self):
        return f"<UserTokenModel(id={self.id}, user_id={self.user_id}, kind={self.kind}, token={self.token[:8]}...)>"


class RevokedTokenModel(Base):
    """Access token ids invalidated by logout"""

    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True)
    jti = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
