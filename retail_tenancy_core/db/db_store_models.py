"""
Stores, suppliers and customers.

All three carry ``tenant_id`` directly.
"""

from sqlalchemy import Boolean, Column, Date, Index, String

from ..scoping.mixins import TenantOwnedMixin
from .db_base import IdMixin, SoftDeleteMixin, TimestampMixin
from .db_config import Base


class Store(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    """A physical or online store (loja) of a tenant."""

    __tablename__ = "stores"

    name = Column(String(200), nullable=False)
    tax_id = Column(String(18), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_stores_tenant_active", "tenant_id", "is_active"),)


class Supplier(Base, IdMixin, TimestampMixin, TenantOwnedMixin):
    __tablename__ = "suppliers"

    name = Column(String(200), nullable=False)
    trade_name = Column(String(200), nullable=True)
    tax_id = Column(String(18), nullable=True)
    email = Column(String(200), nullable=True)
    phone = Column(String(30), nullable=True)
    contact_name = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class Customer(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    __tablename__ = "customers"

    name = Column(String(200), nullable=False)
    tax_id = Column(String(18), nullable=True)  # CPF or CNPJ
    email = Column(String(200), nullable=True)
    phone = Column(String(30), nullable=True)
    birth_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_customers_tenant_tax_id", "tenant_id", "tax_id"),)
