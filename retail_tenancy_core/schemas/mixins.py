"""
Common Pydantic schema mixins for infrastructure-level patterns.

Reusable mixins keep the read schemas consistent with the ORM mixins in
``db.db_base``.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class IdMixin(BaseModel):
    """Mixin for schemas that include the integer primary key."""

    id: int = Field(..., description="Primary key of the record")


class TimestampMixin(BaseModel):
    """Mixin for schemas that include creation and update timestamps."""

    created_at: datetime = Field(..., description="Timestamp when the record was created")
    updated_at: datetime = Field(..., description="Timestamp when the record was last updated")


class SoftDeleteMixin(BaseModel):
    deleted_at: Optional[datetime] = Field(
        default=None, description="Timestamp when the record was soft deleted"
    )
