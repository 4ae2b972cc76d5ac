"""M-Pesa payment DTOs"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from .base import CamelModel


class StkPushRequestDto(CamelModel):
    order_id: int = Field(..., gt=0)
    phone_number: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)


class StkPushResponse(CamelModel):
    message: str = "Payment request sent. Check your phone to complete the payment."
    checkout_request_id: str
    merchant_request_id: Optional[str] = None
    customer_message: Optional[str] = None


class StkQueryRequestDto(CamelModel):
    checkout_request_id: str = Field(..., min_length=1)


class StkQueryResponse(CamelModel):
    status: str
    payment_status: str
    result_code: Optional[str] = None
    result_description: Optional[str] = None
