"""Request and response schemas."""

from gatehouse.presentation.api.schemas.auth import (
    IdResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)

__all__ = [
    "IdResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
]
