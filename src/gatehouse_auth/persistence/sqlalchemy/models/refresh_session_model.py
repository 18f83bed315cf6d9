"""SQLAlchemy model for refresh sessions.

Each row backs exactly one issued refresh token. Rotation and logout delete
the row; a user holds one row per signed-in device.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from gatehouse_auth.persistence.sqlalchemy.base import AuthBase
from gatehouse_auth.time import utc_now


class RefreshSessionModel(AuthBase):
    """
    SQLAlchemy model for refresh sessions.

    Table: refresh_sessions
    """

    __tablename__ = "refresh_sessions"
    # Ids of revoked rows must never be handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    # Monotonic id, embedded in the refresh token as the ``id`` claim
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # No FK to stay decoupled from the users table
    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<RefreshSessionModel(id={self.id}, user_id={self.user_id})>"
