"""Abstract repository interface for refresh sessions.

A refresh session row exists exactly as long as the refresh token that
embeds its id is usable. Revoking deletes the row.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RefreshSessionData:
    """Immutable refresh session data returned by repository."""

    id: int
    user_id: int
    created_at: datetime
    expires_at: datetime


class RefreshSessionRepository(ABC):
    """
    Abstract repository interface for refresh sessions.

    Implementations must provide methods for:
    - Creating a session row for a user
    - Revoking a single row (idempotently) or all rows of a user
    - Checking that a row still exists and has not expired
    - Pruning expired rows
    """

    @abstractmethod
    async def create(self, user_id: int, expires_at: datetime) -> RefreshSessionData:
        """
        Persist a new refresh session.

        Parameters
        ----------
        user_id
            Owner of the session
        expires_at
            When the backing refresh token stops being valid

        Returns
        -------
        The saved session, including its generated id
        """

    @abstractmethod
    async def find_by_id(self, session_id: int) -> RefreshSessionData | None:
        """Find a session by id, expired or not."""

    @abstractmethod
    async def revoke(self, session_id: int) -> bool:
        """
        Delete a session.

        Returns
        -------
        True if a row was deleted, False if it was already gone
        """

    @abstractmethod
    async def is_valid(self, session_id: int, user_id: int | None = None) -> bool:
        """
        Check that a session exists and has not expired.

        Parameters
        ----------
        session_id
            The session to check
        user_id
            When given, the session must also belong to this user
        """

    @abstractmethod
    async def revoke_all_for_user(self, user_id: int) -> int:
        """Delete every session of a user and return how many were deleted."""

    @abstractmethod
    async def count_for_user(self, user_id: int) -> int:
        """Count the sessions a user currently holds."""

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Delete expired sessions and return how many were deleted."""
