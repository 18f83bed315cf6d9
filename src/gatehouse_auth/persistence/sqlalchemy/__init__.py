"""SQLAlchemy implementation for gatehouse_auth persistence.

Provides:
- AuthBase: Declarative base for auth models
- RefreshSessionModel: SQLAlchemy model for refresh sessions
- RefreshSessionRepositorySQLAlchemy: Repository implementation
"""

from gatehouse_auth.persistence.sqlalchemy.base import AuthBase
from gatehouse_auth.persistence.sqlalchemy.models import RefreshSessionModel
from gatehouse_auth.persistence.sqlalchemy.repositories import (
    RefreshSessionRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "RefreshSessionModel",
    "RefreshSessionRepositorySQLAlchemy",
]
