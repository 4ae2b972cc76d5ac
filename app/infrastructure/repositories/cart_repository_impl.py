"""Cart repository implementation"""

from typing import List, Sequence

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.cart_repository import ICartRepository
from ...domain.entities.cart import CartLine
from ...domain.value_objects.entity_ids import ProductId, UserId
from ...domain.value_objects.money import Money
from ..orm.cart_model import CartItemModel
from ..orm.product_model import ProductModel


class CartRepositoryImpl(ICartRepository):

    def __init__(self, session: AsyncSession, currency: str = "KES"):
        self.session = session
        self.currency = currency

    async def get_lines(self, user_id: UserId) -> List[CartLine]:
        result = await self.session.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, ProductModel.id == CartItemModel.product_id)
            .where(CartItemModel.user_id == user_id.value)
            .order_by(CartItemModel.id)
        )
        return [
            CartLine(
                id=item.id,
                user_id=UserId(item.user_id),
                product_id=ProductId(product.id),
                product_name=product.name,
                unit_price=Money.of(product.price, self.currency),
                quantity=item.quantity,
                available=bool(product.available),
            )
            for item, product in result.all()
        ]

    async def add_quantity(self, user_id: UserId, product_id: ProductId, quantity: int) -> None:
        result = await self.session.execute(
            update(CartItemModel)
            .where(
                CartItemModel.user_id == user_id.value,
                CartItemModel.product_id == product_id.value,
            )
            .values(quantity=CartItemModel.quantity + quantity)
        )
        if result.rowcount == 0:
            self.session.add(CartItemModel(
                user_id=user_id.value,
                product_id=product_id.value,
                quantity=quantity,
            ))
            await self.session.flush()

    async def remove(self, user_id: UserId, item_id: int) -> bool:
        result = await self.session.execute(
            delete(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.user_id == user_id.value,
            )
        )
        return result.rowcount == 1

    async def remove_lines(self, user_id: UserId, item_ids: Sequence[int]) -> int:
        if not item_ids:
            return 0
        result = await self.session.execute(
            delete(CartItemModel).where(
                CartItemModel.user_id == user_id.value,
                CartItemModel.id.in_(list(item_ids)),
            )
        )
        return result.rowcount
