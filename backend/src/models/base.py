"""SQLAlchemy declarative base with common mixins."""
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class CreatedAtMixin:
    """
    Mixin that adds a server-assigned created_at column.

    Uses clock_timestamp() instead of now() so that rows inserted within the same
    transaction still get distinct, correctly ordered creation times. The bookmark
    list is ordered newest-first by this column.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
        index=True,
    )


class TimestampMixin(CreatedAtMixin):
    """Mixin that adds created_at and updated_at columns (timezone-aware)."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )
