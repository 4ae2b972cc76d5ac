"""Entity ID value objects"""

from dataclasses import dataclass


@dataclass(frozen=True)
class _IntId:
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value <= 0:
            raise ValueError(f"{type(self).__name__} must be a positive integer")

    @classmethod
    def from_str(cls, raw: str):
        """Create ID from string representation"""
        return cls(int(raw))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId(_IntId):
    pass


@dataclass(frozen=True)
class OrderId(_IntId):
    pass


@dataclass(frozen=True)
class ProductId(_IntId):
    pass
