"""Kenyan mobile number in the MSISDN form M-Pesa expects (2547XXXXXXXX / 2541XXXXXXXX)"""

import re
from dataclasses import dataclass

from ..exceptions import InvalidPhoneError

_SEPARATORS = re.compile(r"[\s\-().]")
_MSISDN = re.compile(r"^254[17]\d{8}$")


@dataclass(frozen=True)
class PhoneNumber:
    value: str

    @classmethod
    def parse(cls, raw: str) -> "PhoneNumber":
        if raw is None:
            raise InvalidPhoneError("Phone number is required")
        digits = _SEPARATORS.sub("", str(raw))
        if digits.startswith("+"):
            digits = digits[1:]
        if digits.startswith("0") and len(digits) == 10:
            digits = "254" + digits[1:]
        elif len(digits) == 9 and digits[0] in "17":
            digits = "254" + digits
        if not _MSISDN.match(digits):
            raise InvalidPhoneError(f"Invalid phone number: {raw}")
        return cls(digits)

    def __str__(self) -> str:
        return self.value
