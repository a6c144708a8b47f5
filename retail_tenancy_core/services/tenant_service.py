"""
Tenant administration service with direct SQLAlchemy access.

Tenants are created and maintained by administrative action. They are
never hard-deleted; ``soft_delete_tenant`` stamps ``deleted_at`` and every
lookup (here and in the context resolver) then treats the tenant as gone.

Writes are flushed, not committed: use ``transaction()`` or the service as
a context manager to commit.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError

from ..context.operation_context import operation
from ..db.db_tenant_models import Tenant
from ..exceptions import BaseError, ErrorCode, ServiceError
from ..schemas.tenant_schema import TenantCreate, TenantRead, TenantUpdate
from .base_service import SessionManagedService


class TenantService(SessionManagedService):
    """Create, read, update and soft delete tenants."""

    def _get_live_tenant(self, tenant_id: int, operation_name: str) -> Tenant:
        tenant = (
            self.session.query(Tenant)
            .filter(Tenant.id == tenant_id, Tenant.deleted_at.is_(None))
            .first()
        )
        if tenant is None:
            raise ServiceError(
                f"Tenant not found: tenant_id={tenant_id}",
                error_code=ErrorCode.NOT_FOUND,
                operation=operation_name,
                tenant_id=tenant_id,
            )
        return tenant

    @operation()
    def create_tenant(self, tenant_data: TenantCreate) -> TenantRead:
        """
        Create a new tenant.

        Raises:
            ServiceError: DUPLICATE when the tax id is taken (by a deleted
                tenant too), INTERNAL_ERROR on other failures
        """
        try:
            if self.session.query(exists().where(Tenant.tax_id == tenant_data.tax_id)).scalar():
                raise ServiceError(
                    f"Tenant already exists: tax_id={tenant_data.tax_id}",
                    error_code=ErrorCode.DUPLICATE,
                    operation="create_tenant",
                    tax_id=tenant_data.tax_id,
                )

            tenant = Tenant(**tenant_data.model_dump())
            self.session.add(tenant)
            self.session.flush()

            self.logger.info(f"Created tenant: id={tenant.id}, tax_id={tenant.tax_id}")
            return TenantRead.model_validate(tenant)

        except IntegrityError as e:
            self.session.rollback()
            raise ServiceError(
                f"Tenant already exists: tax_id={tenant_data.tax_id}",
                error_code=ErrorCode.DUPLICATE,
                operation="create_tenant",
                tax_id=tenant_data.tax_id,
                cause=e,
            ) from e
        except BaseError:
            raise
        except Exception as e:
            self._handle_service_exception("create_tenant", e)

    @operation()
    def get_tenant(self, tenant_id: int) -> TenantRead:
        """
        Raises:
            ServiceError: NOT_FOUND when missing or soft deleted
        """
        return TenantRead.model_validate(self._get_live_tenant(tenant_id, "get_tenant"))

    @operation()
    def list_tenants(
        self, active_only: bool = False, limit: int = 100, offset: int = 0
    ) -> List[TenantRead]:
        """
        List tenants that are not soft deleted, oldest first.

        Args:
            active_only: Only tenants flagged active
            limit: Maximum number of tenants to return
            offset: Number of tenants to skip
        """
        try:
            query = self.session.query(Tenant).filter(Tenant.deleted_at.is_(None))
            if active_only:
                query = query.filter(Tenant.is_active.is_(True))

            tenants = query.order_by(Tenant.id).offset(offset).limit(limit).all()
            return [TenantRead.model_validate(tenant) for tenant in tenants]

        except Exception as e:
            self._handle_service_exception("list_tenants", e)

    @operation()
    def update_tenant(self, tenant_id: int, update_data: TenantUpdate) -> TenantRead:
        """
        Apply the fields set on ``update_data``.

        Raises:
            ServiceError: NOT_FOUND when missing or soft deleted
        """
        tenant = self._get_live_tenant(tenant_id, "update_tenant")

        try:
            for key, value in update_data.model_dump(exclude_unset=True).items():
                setattr(tenant, key, value)
            self.session.flush()

            self.logger.info(f"Updated tenant: tenant_id={tenant_id}")
            return TenantRead.model_validate(tenant)

        except Exception as e:
            self._handle_service_exception("update_tenant", e, tenant_id)

    @operation()
    def soft_delete_tenant(self, tenant_id: int) -> bool:
        """
        Mark the tenant deleted. Its rows stay in place.

        Raises:
            ServiceError: NOT_FOUND when missing or already deleted
        """
        tenant = self._get_live_tenant(tenant_id, "soft_delete_tenant")
        tenant.soft_delete()
        self.session.flush()

        self.logger.info(f"Soft deleted tenant: tenant_id={tenant_id}")
        return True

    def is_membership_valid(self, tenant, at: Optional[datetime] = None) -> bool:
        """Whether ``at`` (default: now) falls inside the tenant's membership window."""
        if isinstance(tenant, int):
            tenant = self._get_live_tenant(tenant, "is_membership_valid")
        return tenant.is_membership_valid(at)
