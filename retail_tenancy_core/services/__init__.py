"""Service layer."""

from .base_service import SessionManagedService
from .tenant_service import TenantService

__all__ = ["SessionManagedService", "TenantService"]
