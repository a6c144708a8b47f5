"""
Constants and enums for the retail tenancy core.

This module centralizes the magic strings used throughout the package
to keep them consistent between configuration, logging and the context store.
"""

from enum import Enum

# Session key used by the session-backed context store
SESSION_CONTEXT_KEY = "empresa_context_id"

# Permission granting a principal the right to act as any tenant
CROSS_TENANT_PERMISSION = "empresas.acessar_todas"

# Role that is granted every permission by the role authorizer
SUPER_ADMIN_ROLE = "Administrador Geral"


class QueueName(str, Enum):
    """Standard queue names used by the logging handlers."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    ENFORCE_TENANT_STATUS = "ENFORCE_TENANT_STATUS"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
    DATABASE_URL = "DATABASE_URL"
    DB_TYPE = "DB_TYPE"
    DB_PATH = "DB_PATH"
    DB_HOST = "DB_HOST"
    DB_PORT = "DB_PORT"
    DB_NAME = "DB_NAME"
    DB_USER = "DB_USER"
    DB_PASSWORD = "DB_PASSWORD"
    DB_POOL_SIZE = "DB_POOL_SIZE"
    DB_ECHO = "DB_ECHO"
