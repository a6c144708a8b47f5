"""Context management for operations and tenant isolation."""

from .operation_context import OperationContext, OperationHandler, operation
from .tenant_context import (
    SessionTenantContextStore,
    TenantContextResolver,
    TenantContextStore,
    ThreadLocalTenantContextStore,
)

__all__ = [
    "operation",
    "OperationContext",
    "OperationHandler",
    "SessionTenantContextStore",
    "TenantContextResolver",
    "TenantContextStore",
    "ThreadLocalTenantContextStore",
]
