"""SQLAlchemy declarative base for gatehouse_identity models.

Kept separate from AuthBase; the application creates both metadata sets
against the same engine.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gatehouse_auth.time import utc_now


class IdentityBase(DeclarativeBase):
    """Declarative base for identity models."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
