from gatehouse_auth.persistence.sqlalchemy.models.refresh_session_model import (
    RefreshSessionModel,
)

__all__ = ["RefreshSessionModel"]
