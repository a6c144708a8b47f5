"""
Tenant-scoped query builder for one model class.

Every query starts from ``for_current_tenant()`` unless the caller explicitly
asks for ``for_tenant(id)`` or ``unscoped()``. Without a tenant context the
scoped query matches nothing.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import false
from sqlalchemy.orm import Query, Session

from ..exceptions import ErrorCode, ServiceError
from ..scoping.strategies import get_scoping_strategy, live_criterion

T = TypeVar("T")


class ScopedRepository(Generic[T]):
    """
    Queries and stamping for a tenant-scoped model.

    Args:
        session: SQLAlchemy session
        resolver: TenantContextResolver for the current request
        model_class: Model declaring ``__tenant_scope__``
    """

    def __init__(self, session: Session, resolver, model_class: Type[T]):
        self.session = session
        self.resolver = resolver
        self.model_class = model_class
        self.strategy = get_scoping_strategy(model_class)

    def unscoped(self) -> Query:
        """All rows of every tenant, soft-deleted ones included. Administrative use only."""
        return self.session.query(self.model_class)

    def for_tenant(self, tenant_id: Any, include_deleted: bool = False) -> Query:
        """Rows owned by ``tenant_id``, whatever the bound context is."""
        if tenant_id is None:
            return self.session.query(self.model_class).filter(false())

        query = self.session.query(self.model_class).filter(
            self.strategy.criterion(self.model_class, tenant_id)
        )
        if not include_deleted:
            live = live_criterion(self.model_class)
            if live is not None:
                query = query.filter(live)
        return query

    def for_current_tenant(self) -> Query:
        return self.for_tenant(self.resolver.current_id())

    def query(self) -> Query:
        """Default query: scoped to the current tenant."""
        return self.for_current_tenant()

    def get(self, record_id: Any) -> Optional[T]:
        return self.for_current_tenant().filter(self.model_class.id == record_id).first()

    def add(self, entity: T) -> T:
        """
        Stamp ``entity`` with the current tenant (when unset) and add it to the session.

        Parent-scoped entities are checked against the current tenant before
        they are added. Does not flush or commit.
        """
        if not isinstance(entity, self.model_class):
            raise ServiceError(
                f"Expected {self.model_class.__name__}, got {type(entity).__name__}",
                error_code=ErrorCode.TYPE_MISMATCH,
                operation="add",
            )

        tenant_id = self.resolver.current_id()
        if tenant_id is not None:
            self.strategy.stamp(entity, tenant_id)
            self.strategy.verify_write(entity, tenant_id, self.session)

        self.session.add(entity)
        return entity

    def get_effective_tenant_id(self, entity: T) -> Optional[Any]:
        """Tenant owning ``entity``, following parents through the session."""
        return self.strategy.effective_tenant_id(entity, self.session)

    def belongs_to_current_tenant(self, entity: T) -> bool:
        tenant_id = self.resolver.current_id()
        if tenant_id is None:
            return False
        effective = self.get_effective_tenant_id(entity)
        return effective is not None and effective == tenant_id
