"""Cart line read model"""

from dataclasses import dataclass
from decimal import Decimal

from ..value_objects.money import Money
from ..value_objects.entity_ids import ProductId, UserId


@dataclass
class CartLine:
    id: int
    user_id: UserId
    product_id: ProductId
    product_name: str
    unit_price: Money
    quantity: int
    available: bool = True

    @property
    def subtotal(self) -> Money:
        return self.unit_price.times(self.quantity)

    @property
    def price(self) -> Decimal:
        return self.unit_price.amount
