"""Unit of Work implementation with proper async support"""

from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.unit_of_work import IUnitOfWork
from .user_repository_impl import UserRepositoryImpl
from .token_repository_impl import TokenRepositoryImpl
from .product_repository_impl import ProductRepositoryImpl
from .cart_repository_impl import CartRepositoryImpl
from .order_repository_impl import OrderRepositoryImpl
from .notification_repository_impl import NotificationRepositoryImpl
from .contact_repository_impl import ContactRepositoryImpl


class UnitOfWorkImpl(IUnitOfWork):

    def __init__(self, session: AsyncSession, currency: str = "KES"):
        self.session = session
        self.users = UserRepositoryImpl(session)
        self.tokens = TokenRepositoryImpl(session)
        self.products = ProductRepositoryImpl(session, currency)
        self.carts = CartRepositoryImpl(session, currency)
        self.orders = OrderRepositoryImpl(session)
        self.notifications = NotificationRepositoryImpl(session)
        self.contacts = ContactRepositoryImpl(session)
        self._committed = False

    async def __aenter__(self):
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Commit transaction"""
        try:
            await self.session.commit()
            self._committed = True
        except Exception:
            await self.session.rollback()
            raise

    async def rollback(self) -> None:
        """Rollback transaction"""
        await self.session.rollback()
