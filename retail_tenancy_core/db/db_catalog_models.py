"""
Catalog models: categories, colours, sizes, products and product variants.

Variants have no tenant column; they belong to the tenant of their product.
"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..scoping.mixins import ParentScopedMixin, TenantOwnedMixin
from ..scoping.strategies import ViaParent
from .db_base import IdMixin, SoftDeleteMixin, TimestampMixin
from .db_config import Base


class Category(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class Color(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    __tablename__ = "colors"

    name = Column(String(50), nullable=False)
    hex_code = Column(String(7), nullable=True)


class Size(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    """Size grid entry, displayed by ``sort_order``."""

    __tablename__ = "sizes"

    name = Column(String(20), nullable=False)
    kind = Column(String(30), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)


class Product(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    __tablename__ = "products"

    uuid = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid4()))
    sku = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    cost_price = Column(Numeric(10, 2), nullable=True)
    sale_price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    stock_controlled = Column(Boolean, nullable=False, default=True)

    category = relationship("Category")
    variants = relationship("ProductVariant", back_populates="product")

    __table_args__ = (Index("ix_products_tenant_sku", "tenant_id", "sku", unique=True),)


class ProductVariant(Base, IdMixin, TimestampMixin, SoftDeleteMixin, ParentScopedMixin):
    """Size/colour variant (produto variacao) of a product."""

    __tablename__ = "product_variants"
    __tenant_scope__ = ViaParent("product")

    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    sku = Column(String(60), nullable=False)
    size_id = Column(Integer, ForeignKey("sizes.id"), nullable=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=True)
    additional_price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    product = relationship("Product", back_populates="variants")
    size = relationship("Size")
    color = relationship("Color")
