"""Repository interfaces for gatehouse_auth.

This package defines abstract repository interfaces that can be implemented
by different persistence technologies. The SQLAlchemy implementation lives
in gatehouse_auth.persistence.sqlalchemy.
"""

from gatehouse_auth.repositories.refresh_session_repository import (
    RefreshSessionData,
    RefreshSessionRepository,
)

__all__ = ["RefreshSessionData", "RefreshSessionRepository"]
