"""Access token verification through a published JSON Web Key Set.

Verifiers look keys up by the token's ``kid`` header, so the signing key
can be rotated by publishing a new key set. Tokens signed by a key that
has been removed from the set can no longer be verified.

Forced refetches for unknown key ids are rate limited, so tokens carrying
made-up ``kid`` values cannot be used to flood the key set host.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import jwt

from gatehouse_auth.exceptions import (
    InvalidSignatureError,
    KeySetUnavailableError,
    MalformedTokenError,
)
from gatehouse_auth.schemas import AccessTokenClaims
from gatehouse_auth.services.jwt_service import (
    access_claims_from_payload,
    decode_token,
)
from gatehouse_auth.services.key_material import SIGNING_ALGORITHM

logger = logging.getLogger(__name__)


def _parse_key_set(data: Any) -> jwt.PyJWKSet:
    if not isinstance(data, dict) or "keys" not in data:
        msg = "Invalid JWKS response: missing 'keys' field"
        raise KeySetUnavailableError(msg)
    try:
        return jwt.PyJWKSet.from_dict(data)
    except jwt.PyJWKSetError as e:
        msg = f"Invalid JWKS response: {e}"
        raise KeySetUnavailableError(msg) from e


class JWKSProvider(ABC):
    """Source of public keys for access token verification."""

    @abstractmethod
    async def get_key_set(self, force_refresh: bool = False) -> jwt.PyJWKSet:
        """Return the current key set, refetching when asked to."""

    async def get_signing_key(self, key_id: str) -> jwt.PyJWK | None:
        """Find the key with ``key_id``, refetching once if it is unknown."""
        key = self._find(await self.get_key_set(), key_id)
        if key is None:
            # Keys may have rotated since the last fetch
            key = self._find(await self.get_key_set(force_refresh=True), key_id)
        return key

    @staticmethod
    def _find(key_set: jwt.PyJWKSet, key_id: str) -> jwt.PyJWK | None:
        for key in key_set.keys:
            if key.key_id == key_id:
                return key
        return None


class StaticJWKSProvider(JWKSProvider):
    """Key set held in memory, e.g. this service's own public key."""

    def __init__(self, jwks: dict[str, Any]):
        self._key_set = _parse_key_set(jwks)

    async def get_key_set(self, force_refresh: bool = False) -> jwt.PyJWKSet:
        return self._key_set


class RemoteJWKSProvider(JWKSProvider):
    """Key set fetched over HTTP from a well-known location and cached.

    A cached key set is reused for ``cache_seconds``. A forced refresh
    (unknown ``kid``) refetches at most once per ``min_refresh_seconds``;
    inside that window the cached set is returned and the key stays unknown.
    Concurrent callers share a single in-flight fetch.
    """

    DEFAULT_CACHE_SECONDS = 300
    DEFAULT_MIN_REFRESH_SECONDS = 30
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        jwks_uri: str,
        cache_seconds: int = DEFAULT_CACHE_SECONDS,
        client: httpx.AsyncClient | None = None,
        min_refresh_seconds: int = DEFAULT_MIN_REFRESH_SECONDS,
    ):
        self._jwks_uri = jwks_uri
        self._cache_seconds = cache_seconds
        self._min_refresh_seconds = min_refresh_seconds
        self._client = client
        self._key_set: jwt.PyJWKSet | None = None
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    async def get_key_set(self, force_refresh: bool = False) -> jwt.PyJWKSet:
        if self._key_set is not None and self._is_fresh(force_refresh):
            return self._key_set

        async with self._lock:
            # Another caller may have fetched while this one was waiting
            if self._key_set is not None and self._is_fresh(force_refresh):
                return self._key_set

            self._key_set = await self._fetch()
            self._fetched_at = time.monotonic()
            return self._key_set

    def _is_fresh(self, force_refresh: bool) -> bool:
        age = time.monotonic() - self._fetched_at
        if force_refresh:
            return age < self._min_refresh_seconds
        return age < self._cache_seconds

    async def _fetch(self) -> jwt.PyJWKSet:
        logger.debug("Fetching signing key set from %s", self._jwks_uri)
        try:
            if self._client is not None:
                response = await self._client.get(
                    self._jwks_uri,
                    timeout=self.DEFAULT_TIMEOUT,
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(
                        self._jwks_uri,
                        timeout=self.DEFAULT_TIMEOUT,
                    )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not fetch key set from %s: %s", self._jwks_uri, e)
            msg = f"Could not fetch key set: {e}"
            raise KeySetUnavailableError(msg) from e

        return _parse_key_set(data)


class AccessTokenVerifier:
    """Verifies access tokens using keys from a ``JWKSProvider``.

    Examples
    --------
    >>> verifier = AccessTokenVerifier(
    ...     RemoteJWKSProvider("https://auth.example.com/.well-known/jwks.json"),
    ...     issuer="auth-service",
    ... )
    >>> claims = await verifier.verify(token)
    """

    def __init__(self, provider: JWKSProvider, issuer: str):
        self._provider = provider
        self._issuer = issuer

    async def verify(self, token: str) -> AccessTokenClaims:
        """Verify an access token and return its claims.

        Raises
        ------
        MalformedTokenError
            If the header cannot be read or carries no ``kid``
        InvalidSignatureError
            If no published key matches or the signature is wrong
        TokenExpiredError
            If the token has expired
        KeySetUnavailableError
            If the key set cannot be fetched
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Malformed token header: {e}") from e

        key_id = header.get("kid")
        if not key_id:
            msg = "Token header missing 'kid'"
            raise MalformedTokenError(msg)

        signing_key = await self._provider.get_signing_key(key_id)
        if signing_key is None:
            msg = "No published key matches the token"
            raise InvalidSignatureError(msg)

        payload = decode_token(token, signing_key.key, SIGNING_ALGORITHM, self._issuer)
        return access_claims_from_payload(payload)
