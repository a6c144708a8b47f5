"""
Centralized configuration management for the retail tenancy core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Tenancy behaviour switches
- Validation using Pydantic
"""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    CROSS_TENANT_PERMISSION,
    SESSION_CONTEXT_KEY,
    EnvironmentVariable,
    LogLevel,
    QueueName,
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class QueueConfig(BaseModel):
    """Queue configuration for shipping logs to Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")
    batch_size: int = Field(default=10, description="Log entries buffered before sending")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling package behaviour."""

    enable_logs_queue: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.ENABLE_LOGS_QUEUE.value),
        description="Ship structured logs to the Azure logs queue",
    )
    enable_operation_logging: bool = Field(
        default=True, description="Log ENTER/EXIT lines for decorated operations"
    )


class TenancyConfig(BaseModel):
    """Behaviour of the tenant context resolver and the scoping strategies."""

    session_key: str = Field(
        default=SESSION_CONTEXT_KEY, description="Key used by the session-backed context store"
    )
    cross_tenant_permission: str = Field(
        default=CROSS_TENANT_PERMISSION,
        description="Permission that lets a principal act as any tenant",
    )
    enforce_tenant_status: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.ENFORCE_TENANT_STATUS.value),
        description="Treat inactive or expired tenants as unavailable",
    )
    max_parent_depth: int = Field(
        default=8, ge=1, description="Longest parent chain a via-parent strategy may follow"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env_flag("DEBUG"),
        description="Debug mode",
    )

    # Sub-configurations
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")
    tenancy: TenancyConfig = Field(
        default_factory=TenancyConfig, description="Tenancy configuration"
    )

    # Custom configuration
    custom: Dict[str, Any] = Field(default_factory=dict, description="Custom configuration values")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()

    def get_custom(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self.custom.get(key, default)

    def set_custom(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self.custom[key] = value


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
