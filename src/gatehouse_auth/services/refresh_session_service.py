"""Refresh session bookkeeping on top of a RefreshSessionRepository."""

import logging
from datetime import timedelta

from gatehouse_auth.repositories import RefreshSessionData, RefreshSessionRepository
from gatehouse_auth.time import utc_now

logger = logging.getLogger(__name__)


class RefreshSessionService:
    """Creates, revokes and checks the rows that back refresh tokens."""

    DEFAULT_TTL_DAYS = 365

    def __init__(
        self,
        repository: RefreshSessionRepository,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        self._repo = repository
        self._ttl = timedelta(days=ttl_days)

    async def persist(self, user_id: int) -> RefreshSessionData:
        """Create a session for ``user_id`` expiring one TTL from now."""
        session = await self._repo.create(user_id, utc_now() + self._ttl)
        logger.debug("Refresh session %s created for user %s", session.id, user_id)
        return session

    async def revoke(self, session_id: int) -> None:
        """Revoke a session. Revoking a missing session is not an error."""
        deleted = await self._repo.revoke(session_id)
        if deleted:
            logger.debug("Refresh session %s revoked", session_id)
        else:
            logger.debug("Refresh session %s was already revoked", session_id)

    async def is_valid(self, session_id: int, user_id: int | None = None) -> bool:
        return await self._repo.is_valid(session_id, user_id)

    async def count(self, user_id: int) -> int:
        """Number of devices the user is currently signed in on."""
        return await self._repo.count_for_user(user_id)

    async def revoke_all(self, user_id: int) -> int:
        """Sign the user out everywhere."""
        count = await self._repo.revoke_all_for_user(user_id)
        logger.info("Revoked %d refresh sessions for user %s", count, user_id)
        return count

    async def prune_expired(self) -> int:
        count = await self._repo.cleanup_expired()
        if count:
            logger.info("Pruned %d expired refresh sessions", count)
        return count
