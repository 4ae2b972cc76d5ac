"""Catalog product entity"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..value_objects.money import Money
from ..value_objects.entity_ids import ProductId
from ...core.clock import utcnow


@dataclass
class Product:
    id: Optional[ProductId]
    name: str
    price: Money
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    available: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Product name is required")

    def reprice(self, price: Money) -> None:
        """Catalog edits never touch historical orders; items keep their snapshot"""
        self.price = price
        self.updated_at = utcnow()
