"""Verified token claims as seen by the application layer."""

from __future__ import annotations

from dataclasses import dataclass

from gatehouse_auth import AccessTokenClaims, MalformedTokenError, RefreshTokenClaims
from gatehouse_identity import UserRole


def _parse_user_id(subject: str) -> int:
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        msg = "Token subject is not a user id"
        raise MalformedTokenError(msg) from e


def _parse_role(role: str) -> UserRole:
    try:
        return UserRole(role)
    except ValueError as e:
        msg = f"Unknown role in token: {role!r}"
        raise MalformedTokenError(msg) from e


@dataclass(frozen=True)
class SessionClaims:
    """
    Immutable identity of the caller, taken from a verified token.

    ``session_id`` is only set when the claims come from a refresh token;
    it names the RefreshSession row that logout and rotation revoke.
    """

    user_id: int
    role: UserRole
    session_id: int | None = None

    @classmethod
    def from_access_claims(cls, claims: AccessTokenClaims) -> SessionClaims:
        return cls(
            user_id=_parse_user_id(claims.subject),
            role=_parse_role(claims.role),
        )

    @classmethod
    def from_refresh_claims(cls, claims: RefreshTokenClaims) -> SessionClaims:
        try:
            session_id = int(claims.session_id)
        except (TypeError, ValueError) as e:
            msg = "Refresh token id is not a session id"
            raise MalformedTokenError(msg) from e
        return cls(
            user_id=_parse_user_id(claims.subject),
            role=_parse_role(claims.role),
            session_id=session_id,
        )

    def __repr__(self) -> str:
        return (
            f"SessionClaims(user_id={self.user_id}, role={self.role.value}, "
            f"session_id={self.session_id})"
        )
