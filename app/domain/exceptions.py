"""
Domain exception hierarchy.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with:

    DomainError
    ├── ValidationError            400
    │   ├── EmptyCartError
    │   ├── AmountMismatchError
    │   ├── InvalidPhoneError
    │   ├── InvalidOrExpiredTokenError
    │   ├── IllegalTransitionError
    │   └── PaymentNotPendingError
    ├── ConflictError              400
    ├── AuthError                  401
    ├── ForbiddenError             403
    │   └── EmailNotVerifiedError
    ├── NotFoundError              404
    ├── AccountLockedError         423
    ├── ProviderError              500
    │   └── PaymentInitiationError 400 / 502
    └── ServerError                500
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    status_code: int = 400
    default_code: str = "error"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body.update(self.details)
        return body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(DomainError):
    default_code = "validation_error"


class EmptyCartError(ValidationError):
    default_code = "empty_cart"

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class AmountMismatchError(ValidationError):
    default_code = "amount_mismatch"


class InvalidPhoneError(ValidationError):
    default_code = "invalid_phone"


class InvalidOrExpiredTokenError(ValidationError):
    default_code = "invalid_or_expired_token"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class IllegalTransitionError(ValidationError):
    default_code = "illegal_transition"


class PaymentNotPendingError(ValidationError):
    default_code = "payment_not_pending"


class ConflictError(DomainError):
    default_code = "conflict"


class AuthError(DomainError):
    status_code = 401
    default_code = "not_authenticated"


class ForbiddenError(DomainError):
    status_code = 403
    default_code = "forbidden"


class EmailNotVerifiedError(ForbiddenError):
    default_code = "email_not_verified"

    def __init__(self, message: str = "Please verify your email address before logging in"):
        super().__init__(message)


class NotFoundError(DomainError):
    status_code = 404
    default_code = "not_found"


class AccountLockedError(DomainError):
    status_code = 423
    default_code = "account_locked"

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = max(0, int(retry_after_seconds))
        minutes = max(1, -(-self.retry_after_seconds // 60))
        super().__init__(
            f"Account is temporarily locked. Try again in {minutes} minute(s).",
            details={"retryAfter": self.retry_after_seconds},
        )


class ProviderError(DomainError):
    status_code = 500
    default_code = "provider_error"


class PaymentInitiationError(ProviderError):
    default_code = "payment_initiation_failed"

    def __init__(self, message: str, caller_correctable: bool = True):
        self.status_code = 400 if caller_correctable else 502
        super().__init__(message)


class ServerError(DomainError):
    status_code = 500
    default_code = "server_error"

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
