"""Gatehouse Auth - token lifecycle and credential verification.

This package provides authentication infrastructure that is independent
of the identity domain. It handles:
- Password hashing and constant-time comparison (bcrypt)
- RS256 access tokens and their published key set
- HS256 refresh tokens backed by revocable refresh sessions

Architecture:
    gatehouse_auth/
    ├── services/           # Pure logic (passwords, keys, JWT, JWKS)
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   └── sqlalchemy/     # SQLAlchemy implementation
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    from gatehouse_auth import JWTService, PasswordHashingService
    from gatehouse_auth.persistence.sqlalchemy import (
        AuthBase,
        RefreshSessionRepositorySQLAlchemy,
    )
"""

from gatehouse_auth.exceptions import (
    AuthError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidSignatureError,
    InvalidTokenError,
    KeyMaterialError,
    KeySetUnavailableError,
    MalformedTokenError,
    MissingTokenError,
    TokenExpiredError,
    WeakPasswordError,
)
from gatehouse_auth.repositories import RefreshSessionData, RefreshSessionRepository
from gatehouse_auth.schemas import AccessTokenClaims, RefreshTokenClaims, TokenPair
from gatehouse_auth.services import (
    AccessTokenVerifier,
    JWKSProvider,
    JWTService,
    PasswordHashingService,
    RefreshSessionService,
    RemoteJWKSProvider,
    SigningKeyMaterial,
    StaticJWKSProvider,
)

__all__ = [
    # Services
    "AccessTokenVerifier",
    "JWKSProvider",
    "JWTService",
    "PasswordHashingService",
    "RefreshSessionService",
    "RemoteJWKSProvider",
    "SigningKeyMaterial",
    "StaticJWKSProvider",
    # Repositories (interfaces)
    "RefreshSessionData",
    "RefreshSessionRepository",
    # Schemas
    "AccessTokenClaims",
    "RefreshTokenClaims",
    "TokenPair",
    # Exceptions
    "AuthError",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "InvalidSignatureError",
    "InvalidTokenError",
    "KeyMaterialError",
    "KeySetUnavailableError",
    "MalformedTokenError",
    "MissingTokenError",
    "TokenExpiredError",
    "WeakPasswordError",
]
