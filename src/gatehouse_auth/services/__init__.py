"""Authentication services.

Provides password hashing, key material, JWT token management,
key-set based verification and refresh session bookkeeping.
"""

from gatehouse_auth.services.jwks import (
    AccessTokenVerifier,
    JWKSProvider,
    RemoteJWKSProvider,
    StaticJWKSProvider,
)
from gatehouse_auth.services.jwt_service import JWTService
from gatehouse_auth.services.key_material import SigningKeyMaterial
from gatehouse_auth.services.password_service import PasswordHashingService
from gatehouse_auth.services.refresh_session_service import RefreshSessionService

__all__ = [
    "AccessTokenVerifier",
    "JWKSProvider",
    "JWTService",
    "PasswordHashingService",
    "RefreshSessionService",
    "RemoteJWKSProvider",
    "SigningKeyMaterial",
    "StaticJWKSProvider",
]
