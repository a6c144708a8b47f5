"""
Tenant (empresa) model.

Tenants are created by administrative action and never hard-deleted.
"""

from datetime import UTC, datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String

from .db_base import IdMixin, SoftDeleteMixin, TimestampMixin, utc_now
from .db_config import Base


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Tenant(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """A company whose data is isolated from every other tenant."""

    __tablename__ = "tenants"

    uuid = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid4()))
    legal_name = Column(String(200), nullable=False)  # razao social
    trade_name = Column(String(200), nullable=True)  # nome fantasia
    tax_id = Column(String(18), nullable=False, unique=True, index=True)  # CNPJ
    email = Column(String(200), nullable=True)
    phone = Column(String(30), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Membership window
    joined_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name

    def is_membership_valid(self, at: Optional[datetime] = None) -> bool:
        """Whether ``at`` (default: now) falls inside the membership window."""
        at = _as_utc(at or utc_now())
        if self.joined_at is not None and _as_utc(self.joined_at) > at:
            return False
        if self.expires_at is not None and _as_utc(self.expires_at) <= at:
            return False
        return True

    def is_available(self, at: Optional[datetime] = None) -> bool:
        """Active, not soft-deleted and inside the membership window."""
        return bool(self.is_active) and not self.is_deleted and self.is_membership_valid(at)

    def __repr__(self) -> str:
        return f"Tenant(id={self.id!r}, tax_id={self.tax_id!r})"
