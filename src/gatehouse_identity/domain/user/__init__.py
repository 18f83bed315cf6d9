"""User domain manages user identity only.

This domain handles:
- User aggregate (id, email, role, names, tenant)
- Email and role value objects
- The identity store contract
"""

from gatehouse_identity.domain.user.aggregates import User
from gatehouse_identity.domain.user.exceptions import (
    EmailAlreadyExistsError,
    InvalidEmailError,
    UserNotFoundError,
)
from gatehouse_identity.domain.user.repositories import UserRepository
from gatehouse_identity.domain.user.value_objects import (
    Email,
    UserRole,
)

__all__ = [
    "Email",
    "EmailAlreadyExistsError",
    "InvalidEmailError",
    "User",
    "UserNotFoundError",
    "UserRepository",
    "UserRole",
]
