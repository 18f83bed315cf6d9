"""Value objects for the user domain."""

from gatehouse_identity.domain.user.value_objects.email import Email
from gatehouse_identity.domain.user.value_objects.user_role import UserRole

__all__ = [
    "Email",
    "UserRole",
]
