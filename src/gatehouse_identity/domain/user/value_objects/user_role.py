from enum import Enum


class UserRole(str, Enum):
    """Roles carried in tokens. MANAGER is scoped to a single tenant."""

    CUSTOMER = "customer"
    ADMIN = "admin"
    MANAGER = "manager"
