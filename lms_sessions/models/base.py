"""
Declarative base & shared mixins for all models.

Every table gets:
- An integer primary key (database-generated).
- A `created_at` timestamp (UTC, auto-managed).

Using a mixin keeps individual model files focused on domain fields.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base — all models inherit from this."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class CreatedAtMixin:
    """Adds created_at to any model that inherits it."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class IntegerPrimaryKeyMixin:
    """Adds an autoincrement integer `id` primary key."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
