"""
Pydantic schemas for Tenant (empresa) models.

This module defines validation schemas for tenant-related data transfer.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ErrorCode, ValidationError
from .mixins import IdMixin, SoftDeleteMixin, TimestampMixin

_NON_DIGITS = re.compile(r"\D")


def _normalize_tax_id(value: str) -> str:
    # CNPJ is stored as its 14 digits, punctuation stripped
    digits = _NON_DIGITS.sub("", value)
    if len(digits) != 14:
        raise ValidationError(
            "tax_id must contain 14 digits",
            error_code=ErrorCode.INVALID_FORMAT,
            field="tax_id",
            value=value,
        )
    return digits


def _validate_email(value: Optional[str]) -> Optional[str]:
    if value and "@" not in value:
        raise ValidationError(
            "Invalid email address",
            error_code=ErrorCode.INVALID_FORMAT,
            field="email",
            value=value,
        )
    return value


class TenantCreate(BaseModel):
    """
    Schema for creating a new tenant.
    """

    legal_name: str = Field(min_length=1, max_length=200)
    trade_name: Optional[str] = Field(default=None, max_length=200)
    tax_id: str = Field(min_length=1, max_length=18)
    email: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=30)

    # Membership window
    joined_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    is_active: bool = Field(default=True)

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("tax_id")
    def validate_tax_id(cls, v: str) -> str:
        return _normalize_tax_id(v)

    @field_validator("email")
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        """
        Basic email validation.
        """
        return _validate_email(v)


class TenantUpdate(BaseModel):
    """
    Schema for updating an existing tenant.

    The tax id is immutable once the tenant exists.
    """

    legal_name: Optional[str] = Field(default=None, max_length=200)
    trade_name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=30)
    joined_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("email")
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class TenantRead(IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Schema for reading tenant data.
    """

    uuid: str
    legal_name: str
    trade_name: Optional[str] = None
    tax_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    joined_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name
