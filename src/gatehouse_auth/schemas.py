"""Auth schemas and data structures.

These are simple data classes used for transferring decoded token data
between components. None of them are persisted.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AccessTokenClaims:
    """Decoded access token payload.

    Attributes
    ----------
    subject
        String form of the identity's numeric id (``sub`` claim)
    role
        Role string as signed into the token
    issuer
        The ``iss`` claim
    exp
        Token expiration timestamp
    """

    subject: str
    role: str
    issuer: str
    exp: datetime


@dataclass(frozen=True)
class RefreshTokenClaims:
    """Decoded refresh token payload.

    ``session_id`` is the ``id`` claim naming the RefreshSession row that
    backs this token.
    """

    subject: str
    role: str
    session_id: str
    issuer: str
    exp: datetime


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together for one session."""

    access_token: str
    refresh_token: str
    session_id: int
