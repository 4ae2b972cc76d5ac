"""Product DTOs"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class ProductDto(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    available: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, product) -> "ProductDto":
        return cls(
            id=product.id.value,
            name=product.name,
            description=product.description,
            price=float(product.price.amount),
            category=product.category,
            location=product.location,
            image=product.image,
            available=product.available,
            created_at=product.created_at,
        )


class ProductSearchResponse(CamelModel):
    results: List[ProductDto]
    total: int


class PriceRangeDto(CamelModel):
    min: float
    max: float


class FilterOptionsDto(CamelModel):
    categories: List[str]
    locations: List[str]
    price_range: PriceRangeDto


class SuggestionsResponse(CamelModel):
    suggestions: List[str]


class ProductCreateDto(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    category: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    image: Optional[str] = Field(None, max_length=500)
    available: bool = True


class ProductUpdateDto(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    image: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None
