from gatehouse_auth.persistence.sqlalchemy.repositories.refresh_session_repository import (  # NOQA: E501
    RefreshSessionRepositorySQLAlchemy,
)

__all__ = ["RefreshSessionRepositorySQLAlchemy"]
