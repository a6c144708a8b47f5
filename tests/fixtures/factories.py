"""
Factory Boy factories for generating consistent test data.

Parents are built through SubFactory so every row is reachable from a tenant;
pass explicit parents to put rows under a specific tenant.
"""

from decimal import Decimal

import factory
import factory.fuzzy

from retail_tenancy_core.db import (
    Category,
    Color,
    Customer,
    GoodsReceipt,
    GoodsReceiptItem,
    Payment,
    Product,
    ProductVariant,
    Sale,
    SaleItem,
    Size,
    StockMovement,
    Store,
    Supplier,
    Tenant,
)
from retail_tenancy_core.enums import (
    PaymentMethodEnum,
    PaymentStatusEnum,
    SaleStatusEnum,
    StockMovementTypeEnum,
)

# ==================== BASE FACTORIES ====================


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory with common patterns."""

    class Meta:
        abstract = True
        sqlalchemy_session_persistence = "commit"


# ==================== TENANT FACTORIES ====================


class TenantFactory(BaseFactory):
    class Meta:
        model = Tenant

    legal_name = factory.Faker("company")
    trade_name = factory.Faker("company_suffix")
    tax_id = factory.Sequence(lambda n: f"{n + 10000000000000:014d}")
    email = factory.Faker("company_email")
    is_active = True


# ==================== DIRECTLY SCOPED FACTORIES ====================


class StoreFactory(BaseFactory):
    class Meta:
        model = Store

    tenant = factory.SubFactory(TenantFactory)
    name = factory.Sequence(lambda n: f"Loja {n}")
    is_active = True


class SupplierFactory(BaseFactory):
    class Meta:
        model = Supplier

    tenant = factory.SubFactory(TenantFactory)
    name = factory.Faker("company")


class CustomerFactory(BaseFactory):
    class Meta:
        model = Customer

    tenant = factory.SubFactory(TenantFactory)
    name = factory.Faker("name")
    email = factory.Faker("email")


class CategoryFactory(BaseFactory):
    class Meta:
        model = Category

    tenant = factory.SubFactory(TenantFactory)
    name = factory.Sequence(lambda n: f"Categoria {n}")


class ColorFactory(BaseFactory):
    class Meta:
        model = Color

    tenant = factory.SubFactory(TenantFactory)
    name = factory.Faker("color_name")
    hex_code = factory.Faker("hex_color")


class SizeFactory(BaseFactory):
    class Meta:
        model = Size

    tenant = factory.SubFactory(TenantFactory)
    name = factory.fuzzy.FuzzyChoice(["P", "M", "G", "GG"])
    sort_order = factory.Sequence(lambda n: n)


class ProductFactory(BaseFactory):
    class Meta:
        model = Product

    tenant = factory.SubFactory(TenantFactory)
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    name = factory.Faker("word")
    sale_price = factory.fuzzy.FuzzyDecimal(5, 500)


class SaleFactory(BaseFactory):
    class Meta:
        model = Sale

    store = factory.SubFactory(StoreFactory)
    tenant = factory.SelfAttribute("store.tenant")
    status = SaleStatusEnum.PENDENTE.value
    payment_method = PaymentMethodEnum.PIX.value
    subtotal = Decimal("100.00")
    discount = Decimal("0.00")
    total = Decimal("100.00")


# ==================== PARENT SCOPED FACTORIES ====================


class ProductVariantFactory(BaseFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    sku = factory.Sequence(lambda n: f"VAR-{n:05d}")


class StockMovementFactory(BaseFactory):
    class Meta:
        model = StockMovement

    store = factory.SubFactory(StoreFactory)
    product_variant = factory.SubFactory(ProductVariantFactory)
    movement_type = StockMovementTypeEnum.ENTRADA.value
    quantity = factory.fuzzy.FuzzyInteger(1, 50)


class GoodsReceiptFactory(BaseFactory):
    class Meta:
        model = GoodsReceipt

    store = factory.SubFactory(StoreFactory)
    invoice_number = factory.Sequence(lambda n: f"NF-{n:06d}")


class GoodsReceiptItemFactory(BaseFactory):
    class Meta:
        model = GoodsReceiptItem

    goods_receipt = factory.SubFactory(GoodsReceiptFactory)
    product_variant = factory.SubFactory(ProductVariantFactory)
    quantity = factory.fuzzy.FuzzyInteger(1, 20)
    unit_cost = Decimal("12.50")


class SaleItemFactory(BaseFactory):
    class Meta:
        model = SaleItem

    sale = factory.SubFactory(SaleFactory)
    product_variant = factory.SubFactory(ProductVariantFactory)
    quantity = 1
    unit_price = Decimal("100.00")


class PaymentFactory(BaseFactory):
    class Meta:
        model = Payment

    sale = factory.SubFactory(SaleFactory)
    payment_method = PaymentMethodEnum.DINHEIRO.value
    amount = Decimal("100.00")
    status = PaymentStatusEnum.PAGO.value


# ==================== FACTORY CONFIGURATION ====================


ALL_FACTORIES = [
    TenantFactory,
    StoreFactory,
    SupplierFactory,
    CustomerFactory,
    CategoryFactory,
    ColorFactory,
    SizeFactory,
    ProductFactory,
    SaleFactory,
    ProductVariantFactory,
    StockMovementFactory,
    GoodsReceiptFactory,
    GoodsReceiptItemFactory,
    SaleItemFactory,
    PaymentFactory,
]


def configure_factories(session):
    """Configure all factories to use the provided session."""
    for factory_class in ALL_FACTORIES:
        factory_class._meta.sqlalchemy_session = session
