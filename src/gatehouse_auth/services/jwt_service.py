"""JWT token service.

Provides access token and refresh token creation and verification.

Two independent signing contexts are used:

- Access tokens are signed with RS256 using the service's private key and
  can be verified by anyone holding the published public key.
- Refresh tokens are signed with HS256 using a secret that never leaves
  this service, since only this service ever verifies them.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from gatehouse_auth.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from gatehouse_auth.schemas import AccessTokenClaims, RefreshTokenClaims
from gatehouse_auth.services.key_material import SIGNING_ALGORITHM, SigningKeyMaterial

REFRESH_ALGORITHM = "HS256"


def decode_token(
    token: str,
    key: Any,
    algorithm: str,
    issuer: str,
) -> dict[str, Any]:
    """Verify a token's signature and standard claims and return its payload.

    Raises
    ------
    TokenExpiredError
        If the ``exp`` claim is in the past
    InvalidSignatureError
        If the signature does not verify with ``key``
    MalformedTokenError
        For anything else: undecodable token, wrong algorithm, wrong
        issuer, or missing required claims
    """
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            issuer=issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError from e
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError from e
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(f"Malformed token: {e}") from e


def access_claims_from_payload(payload: dict[str, Any]) -> AccessTokenClaims:
    try:
        return AccessTokenClaims(
            subject=str(payload["sub"]),
            role=str(payload["role"]),
            issuer=payload["iss"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise MalformedTokenError(f"Malformed token payload: {e}") from e


class JWTService:
    """Service for JWT token creation and verification.

    Handles access tokens (short-lived, RS256) and refresh tokens
    (long-lived, HS256) for user sessions.

    Examples
    --------
    >>> service = JWTService(
    ...     key_material=SigningKeyMaterial.generate(),
    ...     refresh_secret="your-secret-key",
    ... )
    >>> token = service.create_access_token("1", "customer")
    >>> service.verify_access_token(token).subject
    '1'
    """

    DEFAULT_ACCESS_EXPIRE_HOURS = 1
    DEFAULT_REFRESH_EXPIRE_DAYS = 365
    DEFAULT_ISSUER = "auth-service"

    def __init__(  # noqa: PLR0913
        self,
        key_material: SigningKeyMaterial,
        refresh_secret: str,
        issuer: str = DEFAULT_ISSUER,
        access_token_expire_hours: int = DEFAULT_ACCESS_EXPIRE_HOURS,
        refresh_token_expire_days: int = DEFAULT_REFRESH_EXPIRE_DAYS,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        key_material
            RSA key pair for access tokens, loaded once at startup.
        refresh_secret
            Secret for signing refresh tokens. Must be kept secure.
        issuer
            Value of the ``iss`` claim, checked on verification.
        access_token_expire_hours
            Hours until access token expires (default 1)
        refresh_token_expire_days
            Days until refresh token expires (default 365)
        """
        if not refresh_secret:
            msg = "JWT refresh secret cannot be empty"
            raise ValueError(msg)

        self._key_material = key_material
        self._refresh_secret = refresh_secret
        self._issuer = issuer
        self._access_expire = timedelta(hours=access_token_expire_hours)
        self._refresh_expire = timedelta(days=refresh_token_expire_days)

    def create_access_token(
        self,
        subject: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a short-lived access token.

        Parameters
        ----------
        subject
            String form of the identity's id
        role
            The identity's role
        expires_delta
            Custom expiration time (optional)

        Returns
        -------
        The encoded JWT token string
        """
        payload = self._base_payload(
            subject,
            role,
            expires_delta or self._access_expire,
        )
        return jwt.encode(
            payload,
            self._key_material.private_key,
            algorithm=SIGNING_ALGORITHM,
            headers={"kid": self._key_material.key_id},
        )

    def create_refresh_token(
        self,
        subject: str,
        role: str,
        session_id: int | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a long-lived refresh token.

        ``session_id`` must be the id of the RefreshSession row persisted
        for this token; it is what logout and rotation revoke.
        """
        payload = self._base_payload(
            subject,
            role,
            expires_delta or self._refresh_expire,
        )
        payload["id"] = str(session_id)
        return jwt.encode(payload, self._refresh_secret, algorithm=REFRESH_ALGORITHM)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """Verify an access token against this service's own public key.

        Other services verify through the published key set instead
        (see ``AccessTokenVerifier``).

        Raises
        ------
        InvalidTokenError
            If token is invalid, expired, or malformed
        """
        payload = decode_token(
            token,
            self._key_material.public_key,
            SIGNING_ALGORITHM,
            self._issuer,
        )
        return access_claims_from_payload(payload)

    def verify_refresh_token(self, token: str) -> RefreshTokenClaims:
        """Verify and decode a refresh token.

        Raises
        ------
        InvalidTokenError
            If token is invalid, expired, or malformed
        """
        payload = decode_token(
            token,
            self._refresh_secret,
            REFRESH_ALGORITHM,
            self._issuer,
        )
        try:
            return RefreshTokenClaims(
                subject=str(payload["sub"]),
                role=str(payload["role"]),
                session_id=str(payload["id"]),
                issuer=payload["iss"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise MalformedTokenError(f"Malformed token payload: {e}") from e

    def _base_payload(
        self,
        subject: str,
        role: str,
        expires_delta: timedelta,
    ) -> dict[str, Any]:
        now = datetime.now(tz=timezone.utc)
        return {
            "sub": str(subject),
            "role": role,
            "iss": self._issuer,
            "iat": now,
            "exp": now + expires_delta,
        }
