"""Unit of Work interface for transaction management"""

from abc import ABC, abstractmethod

from .user_repository import IUserRepository
from .token_repository import ITokenRepository
from .product_repository import IProductRepository
from .cart_repository import ICartRepository
from .order_repository import IOrderRepository
from .notification_repository import INotificationRepository
from .contact_repository import IContactRepository


class IUnitOfWork(ABC):
    """Unit of Work interface for managing transactions across repositories"""

    users: IUserRepository
    tokens: ITokenRepository
    products: IProductRepository
    carts: ICartRepository
    orders: IOrderRepository
    notifications: INotificationRepository
    contacts: IContactRepository

    @abstractmethod
    async def __aenter__(self):
        """Enter async context"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context"""
        pass

    @abstractmethod
    async def commit(self):
        """Commit transaction"""
        pass

    @abstractmethod
    async def rollback(self):
        """Rollback transaction"""
        pass
