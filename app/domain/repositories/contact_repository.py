"""Contact message repository interface"""

from abc import ABC, abstractmethod


class IContactRepository(ABC):

    @abstractmethod
    async def add(self, name: str, email: str, message: str) -> int:
        pass
