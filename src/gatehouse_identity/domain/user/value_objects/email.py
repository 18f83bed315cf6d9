"""Email value object.

Provides validated email addresses for user identification. Surrounding
whitespace is trimmed; case is kept as entered, so lookups are exact.
"""

import re
from dataclasses import dataclass

from gatehouse_identity.domain.user.exceptions import InvalidEmailError

# Validates: user@domain.tld (minimum requirements)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MAX_LENGTH = 255


@dataclass(frozen=True)
class Email:
    """Value object representing a validated email address."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            msg = "Email is required"
            raise InvalidEmailError(msg)

        trimmed = self.value.strip()

        if len(trimmed) > MAX_LENGTH or not EMAIL_PATTERN.match(trimmed):
            msg = "Email should be a valid email"
            raise InvalidEmailError(msg)

        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email('{self.value}')"
