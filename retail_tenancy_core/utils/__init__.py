"""Utility modules for the retail tenancy core."""

from .json_utils import dumps, loads
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    "dumps",
    "loads",
    "AzureQueueHandler",
    "ContextAwareLogger",
    "TenantContextFilter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
