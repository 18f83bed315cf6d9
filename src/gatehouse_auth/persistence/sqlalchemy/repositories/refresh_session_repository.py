"""SQLAlchemy implementation of RefreshSessionRepository.

Revocation deletes the row, so "exists" and "not revoked" are the same
thing. No locking is done here: two concurrent rotations of the same id
both succeed and leave two independent rows behind.
"""

import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse_auth.persistence.sqlalchemy.models import RefreshSessionModel
from gatehouse_auth.repositories import RefreshSessionData, RefreshSessionRepository
from gatehouse_auth.time import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class RefreshSessionRepositorySQLAlchemy(RefreshSessionRepository):
    """SQLAlchemy implementation of RefreshSessionRepository."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_data(self, model: RefreshSessionModel) -> RefreshSessionData:
        """Map SQLAlchemy model to data transfer object."""
        return RefreshSessionData(
            id=model.id,
            user_id=model.user_id,
            created_at=ensure_tz_aware(model.created_at),
            expires_at=ensure_tz_aware(model.expires_at),
        )

    async def create(
        self,
        user_id: int,
        expires_at: datetime,
    ) -> RefreshSessionData:
        model = RefreshSessionModel(
            user_id=user_id,
            created_at=utc_now(),
            expires_at=expires_at,
        )
        self._session.add(model)
        await self._session.flush()
        logger.debug("Created refresh session %s for user %s", model.id, user_id)
        return self._to_data(model)

    async def find_by_id(self, session_id: int) -> RefreshSessionData | None:
        stmt = select(RefreshSessionModel).where(RefreshSessionModel.id == session_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def revoke(self, session_id: int) -> bool:
        stmt = delete(RefreshSessionModel).where(RefreshSessionModel.id == session_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def is_valid(self, session_id: int, user_id: int | None = None) -> bool:
        stmt = select(RefreshSessionModel.id).where(
            RefreshSessionModel.id == session_id,
            RefreshSessionModel.expires_at > utc_now(),
        )
        if user_id is not None:
            stmt = stmt.where(RefreshSessionModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def revoke_all_for_user(self, user_id: int) -> int:
        stmt = delete(RefreshSessionModel).where(RefreshSessionModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount

    async def count_for_user(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(RefreshSessionModel)
            .where(RefreshSessionModel.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def cleanup_expired(self) -> int:
        stmt = delete(RefreshSessionModel).where(
            RefreshSessionModel.expires_at <= utc_now(),
        )
        result = await self._session.execute(stmt)
        return result.rowcount
