"""
Tenant-aware CRUD helpers.

Generic create/update/delete/find operations that work with any tenant-scoped
model, directly or parent scoped. Reads without a tenant context return
nothing; writes without one raise ``NoTenantContextError``.

Each write commits on success and rolls back on failure. Tenancy errors are
raised before anything is written; infrastructure failures are wrapped in
``RepositoryError`` with ``DATABASE_ERROR``.
"""

from typing import Any, Callable, Dict, Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from ..context.operation_context import operation
from ..exceptions import (
    BaseError,
    ErrorCode,
    ForeignTenantAccessError,
    NoTenantContextError,
    RepositoryError,
)
from ..scoping.strategies import DirectColumn, get_scoping_strategy, supports_soft_delete
from ..utils.logger import get_logger
from .scoped_repository import ScopedRepository

T = TypeVar("T")
R = TypeVar("R")


class TenantAwareRepositoryHelper:
    """
    Facade over the tenant context and the scoped repositories.

    Args:
        session: SQLAlchemy session used for every read and write
        resolver: TenantContextResolver for the current request
    """

    def __init__(self, session: Session, resolver):
        self.session = session
        self.resolver = resolver
        self.logger = get_logger()

    def repository(self, model_class: Type[T]) -> ScopedRepository[T]:
        return ScopedRepository(self.session, self.resolver, model_class)

    # ==================== CONTEXT SHORTCUTS ====================

    def current_tenant_id(self) -> Optional[Any]:
        return self.resolver.current_id()

    def current_tenant(self):
        return self.resolver.current()

    def has_context(self) -> bool:
        return self.resolver.has_context()

    def refresh_context(self):
        return self.resolver.refresh()

    def clear_context(self) -> None:
        self.resolver.clear()

    def run_as(self, tenant_id: Any, work: Callable[[], R]) -> R:
        """Run ``work()`` with ``tenant_id`` bound, restoring the previous context afterwards."""
        return self.resolver.run_as(tenant_id, work)

    def _require_tenant_id(self, action: str) -> Any:
        tenant_id = self.resolver.current_id()
        if tenant_id is None:
            raise NoTenantContextError(action=action)
        return tenant_id

    def _require_ownership(self, entity: Any, tenant_id: Any, action: str) -> None:
        effective = self.repository(type(entity)).get_effective_tenant_id(entity)
        if effective is None or effective != tenant_id:
            raise ForeignTenantAccessError(
                action=action,
                model=type(entity).__name__,
                record_id=getattr(entity, "id", None),
                tenant_id=tenant_id,
            )

    def _writable(self, strategy, model_class: Type, data: Dict[str, Any]) -> Dict[str, Any]:
        protected = strategy.protected_attributes if isinstance(strategy, DirectColumn) else set()
        ignored = protected.intersection(data)
        if ignored:
            self.logger.debug(
                f"Ignoring {sorted(ignored)} on {model_class.__name__} payload",
                extra={"model": model_class.__name__},
            )
        return {key: value for key, value in data.items() if key not in protected}

    def _fail(self, action: str, model_class: Type, error: Exception, **context) -> RepositoryError:
        self.session.rollback()
        self.logger.error(
            f"Failed to {action} {model_class.__name__}: {str(error)}",
            extra={"model": model_class.__name__, "error": str(error), **context},
        )
        return RepositoryError(
            f"Failed to {action} {model_class.__name__}: {str(error)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=error,
            model=model_class.__name__,
            **context,
        )

    # ==================== WRITES ====================

    @operation()
    def create_for_current_tenant(self, model_class: Type[T], data: Dict[str, Any]) -> T:
        """
        Create a record owned by the current tenant.

        A ``tenant_id`` or ``tenant`` in ``data`` is ignored; the row belongs
        to the current tenant.
        Parent-scoped records must reference a parent of the current tenant.

        Raises:
            NoTenantContextError: If no tenant is bound
            ForeignTenantAccessError: If the referenced parent belongs elsewhere
            RepositoryError: If the database write fails
        """
        tenant_id = self._require_tenant_id("create")
        strategy = get_scoping_strategy(model_class)

        try:
            record = model_class(**self._writable(strategy, model_class, data))
            strategy.stamp(record, tenant_id, force=True)
            strategy.verify_write(record, tenant_id, self.session)

            self.session.add(record)
            self.session.commit()

            self.logger.info(
                f"Created {model_class.__name__}",
                extra={
                    "model": model_class.__name__,
                    "record_id": getattr(record, "id", None),
                    "tenant_id": tenant_id,
                },
            )
            return record

        except BaseError:
            self.session.rollback()
            raise
        except Exception as e:
            raise self._fail("create", model_class, e, tenant_id=tenant_id)

    @operation()
    def update_for_current_tenant(self, entity: T, data: Dict[str, Any]) -> bool:
        """
        Update a record owned by the current tenant.

        The tenant column is never reassigned; a new parent must belong to the
        current tenant as well.

        Raises:
            NoTenantContextError: If no tenant is bound
            ForeignTenantAccessError: If the record or its new parent belongs elsewhere
            RepositoryError: If the database write fails
        """
        tenant_id = self._require_tenant_id("update")
        self._require_ownership(entity, tenant_id, "update")

        model_class = type(entity)
        strategy = get_scoping_strategy(model_class)
        changes = self._writable(strategy, model_class, data)

        try:
            for key, value in changes.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            strategy.verify_write(entity, tenant_id, self.session)
            self.session.commit()

            self.logger.info(
                f"Updated {model_class.__name__}",
                extra={
                    "model": model_class.__name__,
                    "record_id": getattr(entity, "id", None),
                    "tenant_id": tenant_id,
                },
            )
            return True

        except BaseError:
            self.session.rollback()
            raise
        except Exception as e:
            raise self._fail(
                "update", model_class, e, record_id=getattr(entity, "id", None), tenant_id=tenant_id
            )

    @operation()
    def delete_for_current_tenant(self, entity: T) -> bool:
        """
        Delete a record owned by the current tenant.

        Models with ``deleted_at`` are soft deleted, others removed.

        Raises:
            NoTenantContextError: If no tenant is bound
            ForeignTenantAccessError: If the record belongs elsewhere
            RepositoryError: If the database write fails
        """
        tenant_id = self._require_tenant_id("delete")
        self._require_ownership(entity, tenant_id, "delete")

        model_class = type(entity)
        record_id = getattr(entity, "id", None)
        soft = supports_soft_delete(model_class)

        try:
            if soft:
                entity.soft_delete()
            else:
                self.session.delete(entity)
            self.session.commit()

            self.logger.info(
                f"Deleted {model_class.__name__}",
                extra={
                    "model": model_class.__name__,
                    "record_id": record_id,
                    "tenant_id": tenant_id,
                    "soft_delete": soft,
                },
            )
            return True

        except Exception as e:
            raise self._fail("delete", model_class, e, record_id=record_id, tenant_id=tenant_id)

    # ==================== READS ====================

    def find_for_current_tenant(self, model_class: Type[T], record_id: Any) -> Optional[T]:
        """Record ``record_id`` when the current tenant owns it, else None."""
        tenant_id = self.resolver.current_id()
        if tenant_id is None:
            return None
        return (
            self.repository(model_class)
            .for_tenant(tenant_id)
            .filter(model_class.id == record_id)
            .first()
        )

    def query_for_current_tenant(self, model_class: Type[T]) -> Query:
        """Query over the current tenant's rows; matches nothing without a context."""
        return self.repository(model_class).for_current_tenant()

    def belongs_to_current_tenant(self, entity: Any) -> bool:
        return self.repository(type(entity)).belongs_to_current_tenant(entity)
