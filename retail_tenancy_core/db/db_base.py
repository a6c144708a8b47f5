"""
Base column mixins shared by every retail model.

Keeps cross-database compatibility (SQLite/PostgreSQL) and no business logic.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer


def utc_now():
    """Return current UTC time with timezone info attached."""
    return datetime.now(UTC)


class IdMixin:
    """Integer autoincrement primary key."""

    id = Column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Simple mixin for created_at/updated_at timestamps."""

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)


class SoftDeleteMixin:
    """
    Rows are never removed, only stamped with deleted_at.

    Scoped queries exclude soft-deleted rows, and a soft-deleted parent hides
    its transitively scoped children.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utc_now()

    def restore(self) -> None:
        self.deleted_at = None
