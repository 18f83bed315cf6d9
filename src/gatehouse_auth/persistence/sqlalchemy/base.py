"""SQLAlchemy declarative base for gatehouse_auth models.

This provides a separate Base for auth models. The consuming application
should create AuthBase.metadata alongside its own tables.

Examples
--------
async with engine.begin() as conn:
    await conn.run_sync(AuthBase.metadata.create_all)
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for gatehouse_auth models."""
