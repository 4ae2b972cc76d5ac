"""Product repository interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..entities.product import Product
from ..value_objects.entity_ids import ProductId


@dataclass(frozen=True)
class ProductFilter:
    query: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    available_only: bool = True
    sort_by: str = "name"
    sort_order: str = "asc"
    limit: int = 50
    offset: int = 0


class IProductRepository(ABC):

    @abstractmethod
    async def get_by_id(self, product_id: ProductId) -> Optional[Product]:
        pass

    @abstractmethod
    async def search(self, criteria: ProductFilter) -> Tuple[List[Product], int]:
        """Return one page of matching products plus the total match count"""
        pass

    @abstractmethod
    async def filter_options(self) -> Dict:
        pass

    @abstractmethod
    async def suggestions(self, prefix: str, limit: int = 8) -> List[str]:
        pass

    @abstractmethod
    async def add(self, product: Product) -> Product:
        pass

    @abstractmethod
    async def update(self, product: Product) -> Product:
        pass
