"""Contact form DTOs"""

from pydantic import EmailStr, Field

from .base import CamelModel


class ContactDto(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=5000)


class ContactResponse(CamelModel):
    message: str = "Thank you for contacting us. We will get back to you soon."
    id: int
