"""Declarative base class and column mixins."""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for models managed through repokit repositories."""

    pass


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    Uses timezone-aware datetime columns (TIMESTAMP WITH TIME ZONE in PostgreSQL)
    to match the timezone-aware default values from datetime.now(UTC).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class SoftDeleteMixin:
    """Mixin adding the deleted_at soft-delete marker.

    A row is live while deleted_at is NULL. Repositories exclude rows with a
    marker from every read unless asked otherwise.
    """

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True
    )


__all__ = ["Base", "SoftDeleteMixin", "TimestampMixin"]
