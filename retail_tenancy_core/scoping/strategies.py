"""
Tenant scoping strategies.

Every tenant-scoped model class declares exactly one strategy in its
``__tenant_scope__`` attribute:

- ``DirectColumn``: the row carries the tenant id itself.
- ``ViaParent``: the row belongs to a parent through a many-to-one relationship
  and inherits the parent's tenant, recursively.

Strategies build SQL criteria for queries and compute effective tenant ids for
loaded objects. They never consult the tenant context themselves; the scoped
repository passes the tenant id in.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Set

from sqlalchemy import and_, inspect
from sqlalchemy.orm import Session

from ..config import get_config
from ..exceptions import (
    ErrorCode,
    ForeignTenantAccessError,
    ServiceError,
    ValidationError,
)


class ScopingStrategy(ABC):
    """How a model class maps its rows to a tenant."""

    @abstractmethod
    def criterion(self, model_class, tenant_id: Any, _depth: int = 0):
        """SQL criterion matching rows of ``model_class`` owned by ``tenant_id``."""

    @abstractmethod
    def effective_tenant_id(
        self, entity, session: Optional[Session] = None, _depth: int = 0
    ) -> Optional[Any]:
        """Tenant id owning ``entity``, or None when membership is undefined."""

    def stamp(self, entity, tenant_id: Any, force: bool = False) -> None:
        """Write the tenant id onto a new entity, when the strategy stores one."""

    def verify_write(self, entity, tenant_id: Any, session: Session) -> None:
        """Raise when ``entity`` would be written outside ``tenant_id``."""


def get_scoping_strategy(model_class) -> ScopingStrategy:
    """
    Return the strategy declared by ``model_class``.

    Raises:
        ServiceError: If the model is not tenant scoped
    """
    strategy = getattr(model_class, "__tenant_scope__", None)
    if not isinstance(strategy, ScopingStrategy):
        raise ServiceError(
            f"{getattr(model_class, '__name__', model_class)} is not tenant scoped",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_scoping_strategy",
        )
    return strategy


def is_tenant_scoped(model_class) -> bool:
    return isinstance(getattr(model_class, "__tenant_scope__", None), ScopingStrategy)


def supports_soft_delete(model_class) -> bool:
    """Whether rows of ``model_class`` carry a ``deleted_at`` column."""
    return "deleted_at" in inspect(model_class).columns


def live_criterion(model_class):
    """SQL criterion selecting rows that are not soft deleted, or None."""
    if supports_soft_delete(model_class):
        return model_class.deleted_at.is_(None)
    return None


def _check_depth(depth: int, model_class) -> None:
    max_depth = get_config().tenancy.max_parent_depth
    if depth > max_depth:
        raise ServiceError(
            f"Parent chain of {model_class.__name__} exceeds {max_depth} hops",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="resolve_parent_chain",
            max_parent_depth=max_depth,
        )


class DirectColumn(ScopingStrategy):
    """
    Tenant id stored in a column of the entity itself.

    ``relationship`` names the many-to-one to the tenant, when the model has
    one. A tenant assigned through it is seen before the session flushes.
    """

    def __init__(self, column: str = "tenant_id", relationship: Optional[str] = None):
        self.column = column
        self.relationship = relationship

    @property
    def protected_attributes(self) -> Set[str]:
        """Attributes a payload may never set."""
        return {name for name in (self.column, self.relationship) if name is not None}

    def criterion(self, model_class, tenant_id, _depth=0):
        return getattr(model_class, self.column) == tenant_id

    def effective_tenant_id(self, entity, session=None, _depth=0):
        if self.relationship is not None:
            if inspect(entity).attrs[self.relationship].history.has_changes():
                owner = getattr(entity, self.relationship)
                return getattr(owner, "id", None)
        return getattr(entity, self.column, None)

    def stamp(self, entity, tenant_id, force=False):
        if force or self.effective_tenant_id(entity) is None:
            setattr(entity, self.column, tenant_id)

    def verify_write(self, entity, tenant_id, session):
        # Writing for another tenant goes through run_as
        owner = self.effective_tenant_id(entity)
        if owner != tenant_id:
            model_class = type(entity)
            raise ForeignTenantAccessError(
                f"{model_class.__name__} is assigned to another tenant",
                model=model_class.__name__,
                record_id=getattr(entity, "id", None),
                owner_tenant_id=owner,
                tenant_id=tenant_id,
            )

    def __repr__(self) -> str:
        return f"DirectColumn({self.column!r})"


class ViaParent(ScopingStrategy):
    """
    Tenant inherited from the parent reached through ``relationship``.

    The relationship must be a many-to-one whose target is itself tenant
    scoped (directly or through its own parent).
    """

    def __init__(self, relationship: str):
        self.relationship = relationship

    def _relationship_property(self, model_class):
        try:
            return inspect(model_class).relationships[self.relationship]
        except KeyError:
            raise ServiceError(
                f"{model_class.__name__} has no relationship named '{self.relationship}'",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="resolve_parent_chain",
            )

    def parent_model(self, model_class):
        return self._relationship_property(model_class).mapper.class_

    def foreign_key_attribute(self, model_class) -> str:
        """Attribute name of the local foreign key column, e.g. ``store_id``."""
        prop = self._relationship_property(model_class)
        column = next(iter(prop.local_columns))
        return inspect(model_class).get_property_by_column(column).key

    def criterion(self, model_class, tenant_id, _depth=0):
        _check_depth(_depth + 1, model_class)
        parent_class = self.parent_model(model_class)
        parent_strategy = get_scoping_strategy(parent_class)

        parent_criterion = parent_strategy.criterion(parent_class, tenant_id, _depth + 1)
        live = live_criterion(parent_class)
        if live is not None:
            parent_criterion = and_(parent_criterion, live)

        # EXISTS semi-join against the parent table
        return getattr(model_class, self.relationship).has(parent_criterion)

    def parent_of(self, entity, session: Optional[Session] = None):
        """
        Load the parent of ``entity``.

        A relationship assigned since the last flush wins. Otherwise the
        foreign key wins over an already loaded relationship, so a parent
        re-assigned through its id is seen before the session flushes.
        """
        model_class = type(entity)
        if inspect(entity).attrs[self.relationship].history.has_changes():
            return getattr(entity, self.relationship)
        if session is not None:
            fk_value = getattr(entity, self.foreign_key_attribute(model_class), None)
            if fk_value is not None:
                return session.get(self.parent_model(model_class), fk_value)
        return getattr(entity, self.relationship, None)

    def effective_tenant_id(self, entity, session=None, _depth=0):
        _check_depth(_depth + 1, type(entity))
        parent = self.parent_of(entity, session)
        if parent is None:
            return None
        return get_scoping_strategy(type(parent)).effective_tenant_id(parent, session, _depth + 1)

    def verify_write(self, entity, tenant_id, session):
        model_class = type(entity)
        parent = self.parent_of(entity, session)
        if parent is None:
            raise ValidationError(
                f"{model_class.__name__} requires a {self.relationship}",
                field=self.foreign_key_attribute(model_class),
                error_code=ErrorCode.MISSING_REQUIRED,
            )

        parent_tenant_id = get_scoping_strategy(type(parent)).effective_tenant_id(parent, session)
        parent_deleted = supports_soft_delete(type(parent)) and parent.deleted_at is not None
        if parent_deleted or parent_tenant_id is None or parent_tenant_id != tenant_id:
            raise ForeignTenantAccessError(
                f"{type(parent).__name__} referenced by {model_class.__name__} "
                f"does not belong to the current tenant",
                model=model_class.__name__,
                parent=type(parent).__name__,
                parent_id=getattr(parent, "id", None),
                tenant_id=tenant_id,
            )

    def __repr__(self) -> str:
        return f"ViaParent({self.relationship!r})"
