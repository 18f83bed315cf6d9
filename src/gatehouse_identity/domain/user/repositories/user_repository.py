"""User repository interface.

This is the identity store contract the session orchestrator relies on.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from gatehouse_identity.domain.user.aggregates.user import User
from gatehouse_identity.domain.user.value_objects.email import Email


class UserRepository(ABC):
    """Repository interface for User aggregates."""

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Find a user by their ID."""

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Find a user by their email address (exact match)."""

    @abstractmethod
    async def exists_by_email(self, email: Union[str, Email]) -> bool:
        """Check if a user exists with the given email."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persist a new user and return it with its assigned id.

        Raises
        ------
        EmailAlreadyExistsError
            If the email is already taken (including a lost insert race)
        """

    @abstractmethod
    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Replace the stored password hash of a user."""

    @abstractmethod
    async def count(self) -> int:
        """Count total users."""
