"""
Tenant context management for the retail tenancy core.

Two layers:

- A ``TenantContextStore`` holds the id of the tenant bound to the current
  request or session. It never validates anything.
- A ``TenantContextResolver`` decides which tenant that should be: it derives
  the tenant from the authenticated principal, re-validates a stored id on
  every read, and lets administrative code temporarily act as another tenant
  through ``run_as`` / ``running_as``.

Invalid stored ids (deleted tenant, principal no longer authorized) are
discarded and re-derived, never raised.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Generator, MutableMapping, Optional, TypeVar

from sqlalchemy.orm import Session

from ..authorization import Authorizer
from ..config import TenancyConfig, get_config
from ..db.db_tenant_models import Tenant
from ..exceptions import TenantNotFoundError
from ..schemas.principal_schema import Principal
from ..utils.logger import get_logger

T = TypeVar("T")

PrincipalProvider = Callable[[], Optional[Principal]]


class TenantContextStore(ABC):
    """
    Holds at most one tenant id for the current request or session.

    Next to the id the store keeps whether it was bound explicitly
    (``set_explicit`` or ``run_as``), so every resolver sharing the store
    validates it the same way.
    """

    @abstractmethod
    def get(self) -> Optional[Any]:
        """Return the bound tenant id, or None."""

    @abstractmethod
    def is_explicit(self) -> bool:
        """Whether the bound tenant id came from an explicit bind."""

    @abstractmethod
    def set(self, tenant_id: Any, explicit: bool = False) -> None:
        """Bind ``tenant_id``, replacing any previous value."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the bound tenant id, if any."""


class ThreadLocalTenantContextStore(TenantContextStore):
    """
    Store backed by thread-local storage.

    All instances share the same per-thread slot, so a store created by the
    logging filter sees the id bound by the resolver on the same thread.
    """

    _thread_local = threading.local()

    def get(self) -> Optional[Any]:
        return getattr(self._thread_local, "tenant_id", None)

    def is_explicit(self) -> bool:
        return self.get() is not None and getattr(self._thread_local, "explicit", False)

    def set(self, tenant_id: Any, explicit: bool = False) -> None:
        self._thread_local.tenant_id = tenant_id
        self._thread_local.explicit = explicit

    def clear(self) -> None:
        for attr in ("tenant_id", "explicit"):
            if hasattr(self._thread_local, attr):
                delattr(self._thread_local, attr)


class SessionTenantContextStore(TenantContextStore):
    """
    Store backed by a web framework session (any mutable mapping).

    The explicit marker lives under ``<key>_explicit`` and is only present
    while set.
    """

    def __init__(self, mapping: MutableMapping[str, Any], key: Optional[str] = None):
        self.mapping = mapping
        self.key = key or get_config().tenancy.session_key
        self.explicit_key = f"{self.key}_explicit"

    def get(self) -> Optional[Any]:
        return self.mapping.get(self.key)

    def is_explicit(self) -> bool:
        return self.get() is not None and bool(self.mapping.get(self.explicit_key, False))

    def set(self, tenant_id: Any, explicit: bool = False) -> None:
        self.mapping[self.key] = tenant_id
        if explicit:
            self.mapping[self.explicit_key] = True
        else:
            self.mapping.pop(self.explicit_key, None)

    def clear(self) -> None:
        self.mapping.pop(self.key, None)
        self.mapping.pop(self.explicit_key, None)


class TenantContextResolver:
    """
    Resolves and validates the active tenant for one request.

    A stored tenant id is only trusted while:
    1. the tenant still exists (not soft deleted), and
    2. the principal may act as it: it is their own tenant, or the authorizer
       grants them the cross-tenant permission.

    With ``enforce_tenant_status`` the tenant must also be active and inside
    its membership window.

    Tenants bound through ``set_explicit`` or ``run_as`` skip the principal
    check (the caller already decided) but must still exist.
    """

    def __init__(
        self,
        session: Session,
        store: Optional[TenantContextStore] = None,
        principal_provider: Optional[PrincipalProvider] = None,
        authorizer: Optional[Authorizer] = None,
        config: Optional[TenancyConfig] = None,
    ):
        self.session = session
        self.store = store if store is not None else ThreadLocalTenantContextStore()
        self.principal_provider = principal_provider
        self.authorizer = authorizer
        self.config = config or get_config().tenancy
        self.logger = get_logger()

    # ==================== LOOKUPS ====================

    def principal(self) -> Optional[Principal]:
        """The authenticated principal, or None for anonymous requests."""
        if self.principal_provider is None:
            return None
        return self.principal_provider()

    def _load_tenant(self, tenant_id: Any) -> Optional[Tenant]:
        if tenant_id is None:
            return None
        return (
            self.session.query(Tenant)
            .filter(Tenant.id == tenant_id, Tenant.deleted_at.is_(None))
            .first()
        )

    def _is_available(self, tenant: Tenant) -> bool:
        if not self.config.enforce_tenant_status:
            return True
        return tenant.is_available()

    def _is_exempt(self, principal: Optional[Principal]) -> bool:
        if principal is None or self.authorizer is None:
            return False
        return bool(
            self.authorizer.has_permission(principal, self.config.cross_tenant_permission)
        )

    def _principal_may_act_as(self, tenant: Tenant) -> bool:
        principal = self.principal()
        if principal is None:
            return False
        if principal.tenant_id is not None and principal.tenant_id == tenant.id:
            return True
        return self._is_exempt(principal)

    def _invalid_reason(self, tenant: Optional[Tenant]) -> Optional[str]:
        if tenant is None:
            return "tenant no longer exists"
        if self.store.is_explicit():
            return None
        if not self._principal_may_act_as(tenant):
            return "principal is not authorized for tenant"
        if not self._is_available(tenant):
            return "tenant is inactive or outside its membership window"
        return None

    def _bind(self, tenant_id: Any, explicit: bool = False) -> None:
        self.store.set(tenant_id, explicit=explicit)
        self.logger.debug(f"Tenant context bound: {tenant_id}", extra={"explicit": explicit})

    # ==================== RESOLUTION ====================

    def resolve_from_principal(self) -> Optional[Tenant]:
        """
        Bind the principal's own tenant.

        Returns:
            The bound tenant, or None (and an empty context) when there is no
            principal, the principal has no tenant, or the tenant is gone.
        """
        principal = self.principal()
        if principal is None or principal.tenant_id is None:
            self.clear()
            return None

        tenant = self._load_tenant(principal.tenant_id)
        if tenant is None or not self._is_available(tenant):
            self.clear()
            return None

        self._bind(tenant.id)
        return tenant

    def current(self) -> Optional[Tenant]:
        """
        The active tenant, validated.

        A stored id that no longer passes validation is cleared and the
        context falls back to ``resolve_from_principal`` (at most once).
        """
        tenant_id = self.store.get()
        if tenant_id is None:
            return self.resolve_from_principal()

        tenant = self._load_tenant(tenant_id)
        reason = self._invalid_reason(tenant)
        if reason is not None:
            principal = self.principal()
            self.logger.warning(
                "Discarding tenant context",
                extra={
                    "tenant_id": tenant_id,
                    "reason": reason,
                    "principal_id": principal.id if principal is not None else None,
                },
            )
            self.clear()
            return self.resolve_from_principal()

        return tenant

    def current_id(self) -> Optional[Any]:
        tenant = self.current()
        return tenant.id if tenant is not None else None

    def has_context(self) -> bool:
        return self.store.get() is not None and self.current() is not None

    def refresh(self) -> Optional[Tenant]:
        """Drop whatever is bound and derive the tenant from the principal again."""
        self.clear()
        return self.resolve_from_principal()

    # ==================== OVERRIDES ====================

    def set_explicit(self, tenant: Tenant) -> None:
        """
        Bind ``tenant`` regardless of the principal's own tenant.

        Raises:
            TenantNotFoundError: If ``tenant`` is no longer a live tenant
        """
        if self._load_tenant(tenant.id) is None:
            raise TenantNotFoundError(tenant.id, operation="set_explicit")
        self._bind(tenant.id, explicit=True)

    def clear(self) -> None:
        self.store.clear()

    @contextmanager
    def running_as(self, tenant_id: Any) -> Generator[Tenant, None, None]:
        """
        Act as ``tenant_id`` for the duration of the block.

        The previous binding (or its absence) is restored on exit, including
        when the block raises. A previous tenant deleted in the meantime is
        not restored; the context is left empty instead.

        Raises:
            TenantNotFoundError: If ``tenant_id`` does not resolve to a live tenant
        """
        previous_id = self.store.get()
        previous_explicit = self.store.is_explicit()

        tenant = self._load_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id, operation="run_as")

        self._bind(tenant.id, explicit=True)
        try:
            yield tenant
        finally:
            self._restore(previous_id, previous_explicit)

    def run_as(self, tenant_id: Any, work: Callable[[], T]) -> T:
        """Run ``work()`` as ``tenant_id`` and return its result."""
        with self.running_as(tenant_id):
            return work()

    def _restore(self, previous_id: Any, previous_explicit: bool) -> None:
        if previous_id is None:
            self.clear()
            return

        if self._load_tenant(previous_id) is None:
            self.logger.warning(
                "Previous tenant no longer exists, leaving context empty",
                extra={"tenant_id": previous_id},
            )
            self.clear()
            return

        self.store.set(previous_id, explicit=previous_explicit)
