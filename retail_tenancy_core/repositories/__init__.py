"""Tenant-scoped data access."""

from .scoped_repository import ScopedRepository
from .tenant_aware_repository import TenantAwareRepositoryHelper

__all__ = ["ScopedRepository", "TenantAwareRepositoryHelper"]
