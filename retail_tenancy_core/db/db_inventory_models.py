"""
Inventory models: stock movements and goods receipts.

None of these carry a tenant column. Movements and receipts belong to a
store; receipt items belong to a receipt, two hops away from the tenant.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..enums import StockMovementTypeEnum
from ..scoping.mixins import ParentScopedMixin
from ..scoping.strategies import ViaParent
from .db_base import IdMixin, TimestampMixin, utc_now
from .db_config import Base


class StockMovement(Base, IdMixin, TimestampMixin, ParentScopedMixin):
    """A single inventory movement (movimentacao de estoque) at a store."""

    __tablename__ = "stock_movements"
    __tenant_scope__ = ViaParent("store")

    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    product_variant_id = Column(
        Integer, ForeignKey("product_variants.id"), nullable=False, index=True
    )
    movement_type = Column(String(20), nullable=False, default=StockMovementTypeEnum.ENTRADA.value)
    quantity = Column(Integer, nullable=False)
    previous_quantity = Column(Integer, nullable=True)
    current_quantity = Column(Integer, nullable=True)
    reason = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    user_id = Column(Integer, nullable=True)  # principal that registered the movement

    store = relationship("Store")
    product_variant = relationship("ProductVariant")


class GoodsReceipt(Base, IdMixin, TimestampMixin, ParentScopedMixin):
    """Goods received from a supplier (entrada de mercadoria)."""

    __tablename__ = "goods_receipts"
    __tenant_scope__ = ViaParent("store")

    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    invoice_number = Column(String(60), nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    notes = Column(Text, nullable=True)
    user_id = Column(Integer, nullable=True)

    store = relationship("Store")
    supplier = relationship("Supplier")
    items = relationship("GoodsReceiptItem", back_populates="goods_receipt")


class GoodsReceiptItem(Base, IdMixin, TimestampMixin, ParentScopedMixin):
    __tablename__ = "goods_receipt_items"
    __tenant_scope__ = ViaParent("goods_receipt")

    goods_receipt_id = Column(
        Integer, ForeignKey("goods_receipts.id"), nullable=False, index=True
    )
    product_variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(10, 2), nullable=False, default=0)

    goods_receipt = relationship("GoodsReceipt", back_populates="items")
    product_variant = relationship("ProductVariant")
