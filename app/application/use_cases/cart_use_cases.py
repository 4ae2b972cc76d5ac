"""Cart use cases"""

from typing import List, Sequence

from ...domain.exceptions import NotFoundError, ValidationError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import ProductId, UserId
from ..dtos.cart_dtos import AddToCartDto, CartLineDto


class AddToCartUseCase:
    """Adds one or more products; quantities accumulate on existing lines"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId, items: Sequence[AddToCartDto]) -> int:
        async with self.unit_of_work:
            # Validate everything before writing anything
            for item in items:
                product = await self.unit_of_work.products.get_by_id(ProductId(item.product_id))
                if not product:
                    raise NotFoundError(f"Product {item.product_id} not found")
                if not product.available:
                    raise ValidationError(f"{product.name} is not available for hire")

            for item in items:
                await self.unit_of_work.carts.add_quantity(user_id, ProductId(item.product_id), item.quantity)
            await self.unit_of_work.commit()
        return len(items)


class GetCartUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId) -> List[CartLineDto]:
        async with self.unit_of_work:
            lines = await self.unit_of_work.carts.get_lines(user_id)
        return [CartLineDto.from_entity(line) for line in lines]


class RemoveFromCartUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId, item_id: int) -> None:
        async with self.unit_of_work:
            removed = await self.unit_of_work.carts.remove(user_id, item_id)
            if not removed:
                raise NotFoundError("Cart item not found")
            await self.unit_of_work.commit()
