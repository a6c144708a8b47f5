"""Pydantic schemas exchanged with the host application."""

from .principal_schema import Principal
from .tenant_schema import TenantCreate, TenantRead, TenantUpdate

__all__ = ["Principal", "TenantCreate", "TenantRead", "TenantUpdate"]
