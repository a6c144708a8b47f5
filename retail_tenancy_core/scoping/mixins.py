"""
Model mixins attaching a scoping strategy to a mapped class.

    class Store(Base, IdMixin, TenantOwnedMixin):
        __tablename__ = "stores"

    class StockMovement(Base, IdMixin, ParentScopedMixin):
        __tablename__ = "stock_movements"
        __tenant_scope__ = ViaParent("store")
"""

from typing import Any, Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import declared_attr, relationship

from .strategies import DirectColumn


class _TenantScopedBase:
    __tenant_scope__ = None

    @property
    def effective_tenant_id(self) -> Optional[Any]:
        """Tenant owning this row, following parents when needed. Not a stored attribute."""
        return self.__tenant_scope__.effective_tenant_id(self)

    def belongs_to_tenant(self, tenant_id: Any) -> bool:
        if tenant_id is None:
            return False
        effective = self.effective_tenant_id
        return effective is not None and effective == tenant_id


class TenantOwnedMixin(_TenantScopedBase):
    """Rows carry ``tenant_id`` and are stamped with the current tenant on creation."""

    __tenant_scope__ = DirectColumn("tenant_id", relationship="tenant")

    @declared_attr
    def tenant_id(cls):
        return Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    @declared_attr
    def tenant(cls):
        return relationship("Tenant")


class ParentScopedMixin(_TenantScopedBase):
    """Rows inherit their tenant from a parent; subclasses set ``__tenant_scope__``."""
