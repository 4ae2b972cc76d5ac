"""Catalog use cases"""

from typing import List

from ...domain.entities.product import Product
from ...domain.exceptions import NotFoundError, ValidationError
from ...domain.repositories.product_repository import ProductFilter
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import ProductId
from ...domain.value_objects.money import Money
from ...core.clock import utcnow
from ..dtos.product_dtos import (
    ProductDto,
    ProductSearchResponse,
    FilterOptionsDto,
    PriceRangeDto,
    ProductCreateDto,
    ProductUpdateDto,
)


class ListProductsUseCase:
    """Available products, optionally narrowed by filters"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, criteria: ProductFilter) -> List[ProductDto]:
        async with self.unit_of_work:
            products, _ = await self.unit_of_work.products.search(criteria)
        return [ProductDto.from_entity(p) for p in products]


class SearchProductsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, criteria: ProductFilter) -> ProductSearchResponse:
        if (criteria.min_price is not None and criteria.max_price is not None
                and criteria.min_price > criteria.max_price):
            raise ValidationError("minPrice cannot be greater than maxPrice")

        async with self.unit_of_work:
            products, total = await self.unit_of_work.products.search(criteria)
        return ProductSearchResponse(
            results=[ProductDto.from_entity(p) for p in products],
            total=total,
        )


class GetFilterOptionsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self) -> FilterOptionsDto:
        async with self.unit_of_work:
            options = await self.unit_of_work.products.filter_options()
        return FilterOptionsDto(
            categories=options["categories"],
            locations=options["locations"],
            price_range=PriceRangeDto(
                min=float(options["price_range"]["min"]),
                max=float(options["price_range"]["max"]),
            ),
        )


class SearchSuggestionsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, prefix: str, limit: int = 8) -> List[str]:
        if not prefix or len(prefix.strip()) < 2:
            return []
        async with self.unit_of_work:
            return await self.unit_of_work.products.suggestions(prefix, limit)


class GetProductUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, product_id: int) -> ProductDto:
        async with self.unit_of_work:
            product = await self.unit_of_work.products.get_by_id(ProductId(product_id))
        if not product:
            raise NotFoundError("Product not found")
        return ProductDto.from_entity(product)


class CreateProductUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, currency: str = "KES"):
        self.unit_of_work = unit_of_work
        self.currency = currency

    async def execute(self, request: ProductCreateDto) -> ProductDto:
        try:
            product = Product(
                id=None,
                name=request.name.strip(),
                price=Money.of(request.price, self.currency),
                description=request.description,
                category=request.category,
                location=request.location,
                image=request.image,
                available=request.available,
            )
        except ValueError as e:
            raise ValidationError(str(e))

        async with self.unit_of_work:
            product = await self.unit_of_work.products.add(product)
            await self.unit_of_work.commit()
        return ProductDto.from_entity(product)


class UpdateProductUseCase:
    """Admin edit; existing orders keep their own price snapshots"""

    def __init__(self, unit_of_work: IUnitOfWork, currency: str = "KES"):
        self.unit_of_work = unit_of_work
        self.currency = currency

    async def execute(self, product_id: int, request: ProductUpdateDto) -> ProductDto:
        async with self.unit_of_work:
            product = await self.unit_of_work.products.get_by_id(ProductId(product_id))
            if not product:
                raise NotFoundError("Product not found")

            changes = request.model_dump(exclude_unset=True)
            if changes.get("name") is not None:
                if not changes["name"].strip():
                    raise ValidationError("Product name is required")
                product.name = changes["name"].strip()
            for field in ("description", "category", "location", "image"):
                if field in changes:
                    setattr(product, field, changes[field])
            if changes.get("available") is not None:
                product.available = changes["available"]
            if changes.get("price") is not None:
                product.reprice(Money.of(changes["price"], self.currency))
            product.updated_at = utcnow()

            await self.unit_of_work.products.update(product)
            await self.unit_of_work.commit()
        return ProductDto.from_entity(product)
