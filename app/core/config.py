"""Application configuration"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Hire-Me Rentals"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Rental equipment store with M-Pesa payments"

    # Security
    SECRET_KEY: str = Field(default="change-me-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    ALGORITHM: str = "HS256"
    AUTH_COOKIE_NAME: str = "access_token"
    AUTH_COOKIE_SECURE: bool = False

    # Account lockout tiers
    LOCKOUT_SHORT_THRESHOLD: int = 3
    LOCKOUT_SHORT_MINUTES: int = 15
    LOCKOUT_LONG_THRESHOLD: int = 5
    LOCKOUT_LONG_MINUTES: int = 60

    # Token lifetimes
    EMAIL_VERIFICATION_TTL_HOURS: int = 24
    PASSWORD_RESET_TTL_HOURS: int = 1

    # Database
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./hire-me.db")
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False

    # Redis (Celery broker)
    REDIS_URL: str = Field(default="redis://localhost:6379")

    # M-Pesa Daraja
    MPESA_ENVIRONMENT: str = Field(default="sandbox")  # sandbox | production
    MPESA_CONSUMER_KEY: str = Field(default="")
    MPESA_CONSUMER_SECRET: str = Field(default="")
    MPESA_SHORTCODE: str = Field(default="174379")
    MPESA_PASSKEY: str = Field(default="")
    MPESA_CALLBACK_URL: str = Field(default="http://localhost:8000/api/mpesa/callback")
    MPESA_CALLBACK_TOKEN: Optional[str] = Field(default=None)  # shared secret expected as ?token=
    MPESA_TIMEOUT_SECONDS: float = Field(default=30.0)
    PAYMENT_AMOUNT_TOLERANCE: float = Field(default=0.01)
    CURRENCY: str = "KES"

    # Email SMTP Configuration
    SMTP_HOST: str = Field(default="localhost")
    SMTP_PORT: int = Field(default=587)
    SMTP_USERNAME: Optional[str] = Field(default=None)
    SMTP_PASSWORD: Optional[str] = Field(default=None)
    SMTP_USE_TLS: bool = Field(default=True)
    SMTP_TIMEOUT_SECONDS: float = Field(default=20.0)
    FROM_EMAIL: str = Field(default="noreply@hire-me.co.ke")
    FROM_NAME: str = Field(default="Hire-Me Rentals")

    # Outbound notifications
    NOTIFICATION_MAX_ATTEMPTS: int = 5
    NOTIFICATION_BATCH_SIZE: int = 50
    NOTIFICATION_CLAIM_TIMEOUT_MINUTES: int = 10

    # CORS
    ALLOWED_HOSTS: list[str] = Field(default=["http://localhost:3000"])

    # Application URLs
    FRONTEND_URL: str = Field(default="http://localhost:3000")

    # Development
    DEBUG: bool = Field(default=False)
    TESTING: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def mpesa_base_url(self) -> str:
        if self.MPESA_ENVIRONMENT == "production":
            return "https://api.safaricom.co.ke"
        return "https://sandbox.safaricom.co.ke"


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings object once at startup"""
    return Settings()
