"""Tenant scoping strategies and the model mixins that declare them."""

from .mixins import ParentScopedMixin, TenantOwnedMixin
from .strategies import (
    DirectColumn,
    ScopingStrategy,
    ViaParent,
    get_scoping_strategy,
    is_tenant_scoped,
)

__all__ = [
    "DirectColumn",
    "ScopingStrategy",
    "ViaParent",
    "get_scoping_strategy",
    "is_tenant_scoped",
    "ParentScopedMixin",
    "TenantOwnedMixin",
]
