"""Application services."""

from gatehouse.application.services.authentication_service import (
    AuthenticationService,
)

__all__ = ["AuthenticationService"]
