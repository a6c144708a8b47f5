"""
Shared test fixtures: SQLite in-memory database, factories and tenant context.

Tests run against a real database; mocks are reserved for external services
(the Azure queue).
"""

import pytest
from sqlalchemy.orm import Session

from retail_tenancy_core.config import reset_config
from retail_tenancy_core.context.tenant_context import (
    TenantContextResolver,
    ThreadLocalTenantContextStore,
)
from retail_tenancy_core.db import DatabaseConfig, DatabaseManager, import_all_models
from retail_tenancy_core.db.db_config import Base, initialize_db
from retail_tenancy_core.exceptions import clear_correlation_id
from retail_tenancy_core.repositories import TenantAwareRepositoryHelper
from retail_tenancy_core.schemas.principal_schema import Principal
from retail_tenancy_core.utils.logger import reset_logging
from tests.fixtures.factories import StoreFactory, TenantFactory, configure_factories


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(db_type="sqlite", database=":memory:", development_mode=True)


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Fresh session and fresh tables for each test.
    """
    session = db_manager.get_session()
    Base.metadata.create_all(db_manager.engine)
    configure_factories(session)

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def clean_context():
    """No tenant binding, config or correlation id leaks between tests."""
    store = ThreadLocalTenantContextStore()
    store.clear()
    reset_config()
    reset_logging()
    clear_correlation_id()
    yield
    store.clear()
    reset_config()
    clear_correlation_id()


# ==================== TENANT SCENARIO FIXTURES ====================


@pytest.fixture
def tenant_a(db_session):
    return TenantFactory(legal_name="Loja A Comercio Ltda")


@pytest.fixture
def tenant_b(db_session):
    return TenantFactory(legal_name="Loja B Comercio Ltda")


@pytest.fixture
def store_a(tenant_a):
    return StoreFactory(tenant=tenant_a)


@pytest.fixture
def store_b(tenant_b):
    return StoreFactory(tenant=tenant_b)


class PrincipalHolder:
    """Mutable stand-in for the authentication layer."""

    def __init__(self, principal=None):
        self.principal = principal

    def __call__(self):
        return self.principal


@pytest.fixture
def principal_holder(tenant_a):
    return PrincipalHolder(Principal(id=1, name="Operador A", tenant_id=tenant_a.id))


@pytest.fixture
def resolver(db_session, principal_holder):
    """Resolver for a principal of tenant A, thread-local store."""
    return TenantContextResolver(db_session, principal_provider=principal_holder)


@pytest.fixture
def helper(db_session, resolver):
    return TenantAwareRepositoryHelper(db_session, resolver)
