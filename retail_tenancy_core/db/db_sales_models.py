"""
Sales models: sales, sale items and payments.

Sales carry ``tenant_id``; items and payments inherit it from their sale.
Totals are stored as entered, nothing here computes them.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..enums import PaymentStatusEnum, SaleStatusEnum
from ..scoping.mixins import ParentScopedMixin, TenantOwnedMixin
from ..scoping.strategies import ViaParent
from .db_base import IdMixin, SoftDeleteMixin, TimestampMixin
from .db_config import Base


class Sale(Base, IdMixin, TimestampMixin, SoftDeleteMixin, TenantOwnedMixin):
    __tablename__ = "sales"

    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    status = Column(String(20), nullable=False, default=SaleStatusEnum.PENDENTE.value)
    payment_method = Column(String(20), nullable=True)  # PaymentMethodEnum value
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    user_id = Column(Integer, nullable=True)  # seller

    store = relationship("Store")
    customer = relationship("Customer")
    items = relationship("SaleItem", back_populates="sale")
    payments = relationship("Payment", back_populates="sale")

    __table_args__ = (Index("ix_sales_tenant_status", "tenant_id", "status"),)


class SaleItem(Base, IdMixin, TimestampMixin, ParentScopedMixin):
    __tablename__ = "sale_items"
    __tenant_scope__ = ViaParent("sale")

    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product_variant = relationship("ProductVariant")


class Payment(Base, IdMixin, TimestampMixin, SoftDeleteMixin, ParentScopedMixin):
    __tablename__ = "payments"
    __tenant_scope__ = ViaParent("sale")

    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    payment_method = Column(String(20), nullable=False)  # PaymentMethodEnum value
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatusEnum.PENDENTE.value)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    sale = relationship("Sale", back_populates="payments")
