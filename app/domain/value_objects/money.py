"""Money value object with currency"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = "KES"

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency required")

    @classmethod
    def of(cls, value: Union[int, float, str, Decimal], currency: str = "KES") -> "Money":
        return cls(amount=Decimal(str(value)), currency=currency)

    @classmethod
    def zero(cls, currency: str = "KES") -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    def __add__(self, other: "Money") -> "Money":
        if other.currency != self.currency:
            raise ValueError("Cannot add amounts in different currencies")
        return Money(self.amount + other.amount, self.currency)

    def times(self, quantity: int) -> "Money":
        return Money(self.amount * quantity, self.currency)

    def quantized(self) -> Decimal:
        return self.amount.quantize(CENT, rounding=ROUND_HALF_UP)

    def whole_units(self) -> int:
        """Amount rounded half-up to a whole unit (M-Pesa only accepts integers)."""
        return int(self.amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def matches(self, value: Union[float, str, Decimal], tolerance: Union[float, str, Decimal]) -> bool:
        return abs(self.amount - Decimal(str(value))) <= Decimal(str(tolerance))

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"
