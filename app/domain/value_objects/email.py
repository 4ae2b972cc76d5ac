from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email


@dataclass(frozen=True)
class Email:
    value: str

    def __post_init__(self):
        try:
            validated = validate_email((self.value or "").strip(), check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email address: {e}") from e
        object.__setattr__(self, "value", validated.normalized.lower())

    def __str__(self) -> str:
        return self.value
