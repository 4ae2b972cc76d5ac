"""Cart repository interface"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..entities.cart import CartLine
from ..value_objects.entity_ids import ProductId, UserId


class ICartRepository(ABC):

    @abstractmethod
    async def get_lines(self, user_id: UserId) -> List[CartLine]:
        """Cart lines joined with current product name, price and availability"""
        pass

    @abstractmethod
    async def add_quantity(self, user_id: UserId, product_id: ProductId, quantity: int) -> None:
        """Insert the line or accumulate onto the existing one"""
        pass

    @abstractmethod
    async def remove(self, user_id: UserId, item_id: int) -> bool:
        pass

    @abstractmethod
    async def remove_lines(self, user_id: UserId, item_ids: Sequence[int]) -> int:
        """Delete exactly these lines; returns how many were still present"""
        pass
