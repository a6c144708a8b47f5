"""
Database wiring for the retail tenancy core.

``DatabaseConfig.from_env`` picks the engine from the application
environment: development and test run on SQLite, everything else on Postgres
unless ``DATABASE_URL`` or ``DB_TYPE`` says otherwise. SQLite connections
enforce foreign keys, so a row can never point at a parent that does not
exist.
"""

import os
from contextlib import contextmanager
from typing import Any, Generator, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker

from ..config import AppConfig, get_config
from ..constants import EnvironmentVariable
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()

SUPPORTED_DB_TYPES = ("sqlite", "postgres")
DEVELOPMENT_ENVIRONMENTS = ("development", "test")


def _env(variable: EnvironmentVariable, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(variable.value, default)


class DatabaseConfig(BaseModel):
    """
    Engine settings.

    ``url`` wins over the individual fields. Without it SQLite opens
    ``database`` as a file path and Postgres is built from host and
    credentials.
    """

    model_config = ConfigDict(frozen=True)

    db_type: str = "sqlite"
    database: str = ":memory:"
    url: Optional[str] = None
    host: Optional[str] = None
    port: int = 5432
    username: Optional[str] = None
    password: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    development_mode: bool = False

    @field_validator("db_type")
    @classmethod
    def validate_db_type(cls, v: str) -> str:
        v = v.lower()
        if v not in SUPPORTED_DB_TYPES:
            raise ValidationError(
                f"Unsupported database type: {v}",
                error_code=ErrorCode.INVALID_FORMAT,
                field="db_type",
                value=v,
                allowed=list(SUPPORTED_DB_TYPES),
            )
        return v

    @property
    def is_sqlite(self) -> bool:
        if self.url:
            return make_url(self.url).get_backend_name() == "sqlite"
        return self.db_type == "sqlite"

    def get_url(self) -> URL:
        """
        SQLAlchemy URL for the engine.

        Raises:
            ValidationError: If Postgres settings are incomplete
        """
        if self.url:
            return make_url(self.url)
        if self.db_type == "sqlite":
            return URL.create("sqlite", database=self.database)
        if not all([self.host, self.database, self.username, self.password]):
            raise ValidationError(
                "Missing required Postgres configuration parameters",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="database_config",
                value={"host": self.host, "database": self.database, "username": self.username},
            )
        return URL.create(
            "postgresql+psycopg2",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def get_connection_string(self) -> str:
        return self.get_url().render_as_string(hide_password=False)

    def __repr__(self) -> str:
        if self.url:
            target = make_url(self.url).render_as_string(hide_password=True)
        else:
            target = f"{self.db_type}://{self.username or ''}@{self.host or ''}/{self.database}"
        return f"DatabaseConfig({target!r}, development_mode={self.development_mode})"

    @classmethod
    def from_env(cls, app_config: Optional[AppConfig] = None) -> "DatabaseConfig":
        """
        Build the configuration for the current application environment.

        Args:
            app_config: Application configuration; the global one when omitted
        """
        app_config = app_config or get_config()
        development = app_config.environment.lower() in DEVELOPMENT_ENVIRONMENTS
        default_type = "sqlite" if development else "postgres"

        return cls(
            db_type=_env(EnvironmentVariable.DB_TYPE, default_type),
            database=_env(
                EnvironmentVariable.DB_NAME if not development else EnvironmentVariable.DB_PATH,
                ":memory:" if development else "retail",
            ),
            url=_env(EnvironmentVariable.DATABASE_URL),
            host=_env(EnvironmentVariable.DB_HOST, "localhost"),
            port=int(_env(EnvironmentVariable.DB_PORT, "5432")),
            username=_env(EnvironmentVariable.DB_USER, "postgres"),
            password=_env(EnvironmentVariable.DB_PASSWORD),
            pool_size=int(_env(EnvironmentVariable.DB_POOL_SIZE, "5")),
            echo=_env(EnvironmentVariable.DB_ECHO, str(app_config.debug)).lower() == "true",
            development_mode=development,
        )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the engine and the session factories for one database."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self):
        url = self.config.get_url()
        if self.config.is_sqlite:
            engine = create_engine(
                url, echo=self.config.echo, connect_args={"check_same_thread": False}
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine
        return create_engine(
            url,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,
        )

    def create_tables(self) -> None:
        import_all_models()
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.config.development_mode:
            raise ServiceError(
                "Cannot drop tables: not in development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
                development_mode=self.config.development_mode,
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Session committed on success, rolled back on error, always closed."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def import_all_models():
    """Import all models to ensure they're registered with SQLAlchemy metadata."""
    from sqlalchemy.orm import configure_mappers

    # Tenant first, the retail tables reference it
    from .db_tenant_models import Tenant  # noqa
    from .db_store_models import Customer, Store, Supplier  # noqa
    from .db_catalog_models import Category, Color, Product, ProductVariant, Size  # noqa
    from .db_inventory_models import GoodsReceipt, GoodsReceiptItem, StockMovement  # noqa
    from .db_sales_models import Payment, Sale, SaleItem  # noqa

    configure_mappers()


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Get the global database manager instance.

    Raises:
        ServiceError: If no database manager has been initialized
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: DatabaseManager) -> None:
    """Set the global database manager instance."""
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Create the global database manager and its tables.

    Args:
        config: Database settings; ``DatabaseConfig.from_env()`` when omitted
    """
    global _db_manager

    config = config or DatabaseConfig.from_env()
    get_logger().info("Initializing database", extra={"database": repr(config)})

    _db_manager = DatabaseManager(config)
    _db_manager.create_tables()
    return _db_manager


def close_db() -> None:
    """Dispose of the global manager's engine, if any."""
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None
