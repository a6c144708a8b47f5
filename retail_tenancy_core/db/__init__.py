"""
SQLAlchemy models for the retail tenancy core.

This module provides a common entry point for every model and the
database wiring helpers.
"""

from .db_base import IdMixin, SoftDeleteMixin, TimestampMixin, utc_now
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_tenant_models import Tenant
from .db_store_models import Customer, Store, Supplier
from .db_catalog_models import Category, Color, Product, ProductVariant, Size
from .db_inventory_models import GoodsReceipt, GoodsReceiptItem, StockMovement
from .db_sales_models import Payment, Sale, SaleItem

__all__ = [
    # Base definitions
    "Base",
    "IdMixin",
    "SoftDeleteMixin",
    "TimestampMixin",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Models
    "Tenant",
    "Store",
    "Supplier",
    "Customer",
    "Category",
    "Color",
    "Size",
    "Product",
    "ProductVariant",
    "StockMovement",
    "GoodsReceipt",
    "GoodsReceiptItem",
    "Sale",
    "SaleItem",
    "Payment",
]
