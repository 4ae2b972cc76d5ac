"""Product repository implementation"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, update, func, or_, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.product_repository import IProductRepository, ProductFilter
from ...domain.entities.product import Product
from ...domain.value_objects.entity_ids import ProductId
from ...domain.value_objects.money import Money
from ..orm.product_model import ProductModel

_SORT_COLUMNS = {
    "name": ProductModel.name,
    "price": ProductModel.price,
    "created_at": ProductModel.created_at,
    "newest": ProductModel.created_at,
}


class ProductRepositoryImpl(IProductRepository):

    def __init__(self, session: AsyncSession, currency: str = "KES"):
        self.session = session
        self.currency = currency

    async def get_by_id(self, product_id: ProductId) -> Optional[Product]:
        model = await self.session.get(ProductModel, product_id.value)
        return self._map_to_entity(model) if model else None

    async def search(self, criteria: ProductFilter) -> Tuple[List[Product], int]:
        conditions = self._conditions(criteria)

        total = await self.session.scalar(
            select(func.count(ProductModel.id)).where(*conditions)
        )

        column = _SORT_COLUMNS.get(criteria.sort_by, ProductModel.name)
        direction = desc if criteria.sort_order == "desc" else asc
        query = (
            select(ProductModel)
            .where(*conditions)
            .order_by(direction(column), ProductModel.id)
            .offset(criteria.offset)
            .limit(criteria.limit)
        )
        result = await self.session.execute(query)
        return [self._map_to_entity(m) for m in result.scalars().all()], total or 0

    async def filter_options(self) -> Dict:
        available = ProductModel.available.is_(True)

        categories = await self.session.execute(
            select(ProductModel.category)
            .where(available, ProductModel.category.isnot(None))
            .distinct()
            .order_by(ProductModel.category)
        )
        locations = await self.session.execute(
            select(ProductModel.location)
            .where(available, ProductModel.location.isnot(None))
            .distinct()
            .order_by(ProductModel.location)
        )
        bounds = await self.session.execute(
            select(func.min(ProductModel.price), func.max(ProductModel.price)).where(available)
        )
        low, high = bounds.one()

        return {
            "categories": [c for c in categories.scalars().all() if c],
            "locations": [loc for loc in locations.scalars().all() if loc],
            "price_range": {
                "min": Decimal(str(low)) if low is not None else Decimal("0"),
                "max": Decimal(str(high)) if high is not None else Decimal("0"),
            },
        }

    async def suggestions(self, prefix: str, limit: int = 8) -> List[str]:
        term = prefix.strip()
        if not term:
            return []
        result = await self.session.execute(
            select(ProductModel.name)
            .where(ProductModel.available.is_(True), ProductModel.name.ilike(f"%{term}%"))
            .distinct()
            .order_by(ProductModel.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def add(self, product: Product) -> Product:
        model = ProductModel(
            name=product.name,
            description=product.description,
            price=product.price.quantized(),
            category=product.category,
            location=product.location,
            image=product.image,
            available=product.available,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        product.id = ProductId(model.id)
        return product

    async def update(self, product: Product) -> Product:
        await self.session.execute(
            update(ProductModel)
            .where(ProductModel.id == product.id.value)
            .values(
                name=product.name,
                description=product.description,
                price=product.price.quantized(),
                category=product.category,
                location=product.location,
                image=product.image,
                available=product.available,
                updated_at=product.updated_at,
            )
        )
        return product

    @staticmethod
    def _conditions(criteria: ProductFilter) -> list:
        conditions = []
        if criteria.available_only:
            conditions.append(ProductModel.available.is_(True))
        if criteria.category:
            conditions.append(func.lower(ProductModel.category) == criteria.category.lower())
        if criteria.location:
            conditions.append(ProductModel.location.ilike(f"%{criteria.location}%"))
        if criteria.min_price is not None:
            conditions.append(ProductModel.price >= criteria.min_price)
        if criteria.max_price is not None:
            conditions.append(ProductModel.price <= criteria.max_price)
        if criteria.query:
            pattern = f"%{criteria.query.strip()}%"
            conditions.append(or_(
                ProductModel.name.ilike(pattern),
                ProductModel.description.ilike(pattern),
                ProductModel.category.ilike(pattern),
                ProductModel.location.ilike(pattern),
            ))
        return conditions

    def _map_to_entity(self, model: ProductModel) -> Product:
        return Product(
            id=ProductId(model.id),
            name=model.name,
            price=Money.of(model.price, self.currency),
            description=model.description,
            category=model.category,
            location=model.location,
            image=model.image,
            available=bool(model.available),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
