"""User DTOs for API layer"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class RegisterUserDto(CamelModel):
    """DTO for user registration"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=32)
    location: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class RegisterResponse(CamelModel):
    message: str
    user_id: int
    email_sent: bool


class LoginUserDto(CamelModel):
    """DTO for user login"""
    email: str
    password: str


class EmailRequestDto(CamelModel):
    """DTO for forgot-password and resend-verification requests"""
    email: str


class ResetPasswordDto(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)


class UpdateProfileDto(CamelModel):
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    location: Optional[str] = Field(None, max_length=255)


class UserDto(CamelModel):
    """DTO for user response"""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    role: str
    email_verified: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user) -> "UserDto":
        return cls(
            id=user.id.value,
            name=user.name,
            email=str(user.email),
            phone=user.phone,
            location=user.location,
            role=user.role.value,
            email_verified=user.email_verified,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class LoginResponse(CamelModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserDto
