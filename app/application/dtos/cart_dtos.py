"""Cart DTOs"""

from typing import List

from pydantic import Field

from .base import CamelModel


class AddToCartDto(CamelModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1, le=1000)


class AddMultipleToCartDto(CamelModel):
    items: List[AddToCartDto] = Field(..., min_length=1)


class CartLineDto(CamelModel):
    id: int
    product_id: int
    name: str
    price: float
    quantity: int
    subtotal: float
    available: bool

    @classmethod
    def from_entity(cls, line) -> "CartLineDto":
        return cls(
            id=line.id,
            product_id=line.product_id.value,
            name=line.product_name,
            price=float(line.unit_price.amount),
            quantity=line.quantity,
            subtotal=float(line.subtotal.amount),
            available=line.available,
        )
