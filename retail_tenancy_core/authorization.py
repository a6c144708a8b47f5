"""
Role/permission authorization collaborator.

Role and permission storage lives in the host application. The tenancy core
only asks one question: does this principal hold a named permission? Any
``Authorizer`` subclass can answer it; ``RolePermissionAuthorizer`` is
an in-memory implementation driven by a role -> permissions mapping.

Permission names follow the ``module.action`` convention (``empresas.edit``,
``vendas.create``). ``group_by_module`` arranges them for role screens.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from .constants import SUPER_ADMIN_ROLE
from .exceptions import permission_denied
from .schemas.principal_schema import Principal

DEFAULT_MODULE = "Geral"

_LEADING_VERB_PATTERNS = (
    re.compile(r"^(create|edit|delete|view|index|show|store|update|destroy)", re.IGNORECASE),
    re.compile(r"^(manage|access|admin)", re.IGNORECASE),
)


class Authorizer(ABC):
    """Capability check consulted by the tenant context resolver."""

    @abstractmethod
    def has_permission(self, principal: Optional[Principal], permission_name: str) -> bool:
        """Whether ``principal`` holds ``permission_name``."""


class RolePermissionAuthorizer(Authorizer):
    """
    Grants permissions through the principal's roles.

    Super roles hold every permission, including ones never listed.
    """

    def __init__(
        self,
        role_permissions: Optional[Mapping[str, Iterable[str]]] = None,
        super_roles: Iterable[str] = (SUPER_ADMIN_ROLE,),
    ):
        self.role_permissions: Dict[str, Set[str]] = {
            role: set(names) for role, names in (role_permissions or {}).items()
        }
        self.super_roles = frozenset(super_roles)

    def is_super(self, principal: Optional[Principal]) -> bool:
        return principal is not None and any(role in self.super_roles for role in principal.roles)

    def permissions_for(self, principal: Optional[Principal]) -> Set[str]:
        """Union of the permissions granted by each role of ``principal``."""
        if principal is None:
            return set()
        granted: Set[str] = set()
        for role in principal.roles:
            granted |= self.role_permissions.get(role, set())
        return granted

    def has_permission(self, principal: Optional[Principal], permission_name: str) -> bool:
        if principal is None:
            return False
        if self.is_super(principal):
            return True
        return permission_name in self.permissions_for(principal)


def require_permission(
    authorizer: Authorizer, principal: Optional[Principal], permission_name: str
) -> None:
    """
    Raise a PERMISSION_DENIED error unless ``principal`` holds ``permission_name``.

    Raises:
        BaseError: With ErrorCode.PERMISSION_DENIED and status 403
    """
    if not authorizer.has_permission(principal, permission_name):
        raise permission_denied(
            "access",
            permission_name,
            principal_id=principal.id if principal is not None else None,
        )


def extract_module(permission_name: str) -> str:
    """
    Module a permission belongs to.

    ``"users.create"`` -> ``"Users"``; without a dot, a leading verb is
    stripped (``"createProducts"`` -> ``"Products"``) and an empty remainder
    maps to ``"Geral"``.
    """
    if "." in permission_name:
        return _upper_first(permission_name.split(".")[0])

    remainder = permission_name
    for pattern in _LEADING_VERB_PATTERNS:
        remainder = pattern.sub("", remainder)

    return _upper_first(remainder.strip()) or DEFAULT_MODULE


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def group_by_module(
    permissions: Iterable[Union[str, Mapping[str, Any]]]
) -> List[Dict[str, Any]]:
    """
    Group permissions by module, modules sorted by name.

    Accepts bare names or mappings carrying a ``name`` key; each entry is kept
    as given inside its group.

    Returns:
        ``[{"name": module, "permissions": [...]}, ...]``
    """
    grouped: Dict[str, Dict[str, Any]] = {}

    for permission in permissions:
        name = permission if isinstance(permission, str) else permission["name"]
        module = extract_module(name)
        grouped.setdefault(module, {"name": module, "permissions": []})
        grouped[module]["permissions"].append(permission)

    return [grouped[module] for module in sorted(grouped)]
