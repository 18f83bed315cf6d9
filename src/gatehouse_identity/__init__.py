"""Gatehouse Identity - the identity store.

This package owns who a user is:
- User aggregate (id, email, role, names, tenant)
- Email and role value objects
- UserRepository contract and its SQLAlchemy implementation

Credentials checks and tokens live in gatehouse_auth; this package only
stores the password hash it is handed.
"""

from gatehouse_identity.domain.user import (
    Email,
    EmailAlreadyExistsError,
    InvalidEmailError,
    User,
    UserNotFoundError,
    UserRepository,
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
