"""User ORM Model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import UserRole
from .columns import enum_column


class UserModel(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)
    role = Column(enum_column(UserRole), default=UserRole.USER, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)

    # Lockout bookkeeping
    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    last_login = Column(DateTime, nullable=True)

    # Relationships
    orders = relationship('OrderModel', back_populates='user')
    cart_items = relationship('CartItemModel', back_populates='user', cascade='all, delete-orphan')
