"""
Tests for TenantAwareRepositoryHelper CRUD operations.

Each write is checked for its effect in the database, not only its return value.
"""

from unittest.mock import patch

import pytest

from retail_tenancy_core.db import (
    GoodsReceiptItem,
    Product,
    ProductVariant,
    Store,
    Supplier,
)
from retail_tenancy_core.exceptions import (
    ErrorCode,
    ForeignTenantAccessError,
    NoTenantContextError,
    RepositoryError,
    ValidationError,
)
from tests.fixtures.factories import (
    GoodsReceiptFactory,
    ProductFactory,
    ProductVariantFactory,
    StoreFactory,
    SupplierFactory,
)


class TestCreate:
    def test_direct_create_forces_current_tenant(self, helper, tenant_a, tenant_b):
        store = helper.create_for_current_tenant(
            Store, {"name": "Filial Norte", "tenant_id": tenant_b.id}
        )

        assert store.id is not None
        assert store.tenant_id == tenant_a.id

    def test_direct_create_ignores_tenant_object(self, db_session, helper, tenant_a, tenant_b):
        store = helper.create_for_current_tenant(Store, {"name": "Filial Sul", "tenant": tenant_b})

        db_session.expire_all()
        assert store.tenant_id == tenant_a.id

    def test_create_without_context_raises(self, db_session, helper, principal_holder):
        principal_holder.principal = None

        with pytest.raises(NoTenantContextError) as exc_info:
            helper.create_for_current_tenant(Store, {"name": "Sem empresa"})

        assert exc_info.value.status_code == 428
        assert exc_info.value.error_code == ErrorCode.PRECONDITION_FAILED
        assert db_session.query(Store).count() == 0

    def test_parent_scoped_create(self, helper, tenant_a):
        product = ProductFactory(tenant=tenant_a)

        variant = helper.create_for_current_tenant(
            ProductVariant, {"product_id": product.id, "sku": "CAM-P"}
        )

        assert variant.id is not None
        assert helper.belongs_to_current_tenant(variant) is True

    def test_parent_scoped_create_with_foreign_parent(self, db_session, helper, tenant_b):
        product = ProductFactory(tenant=tenant_b)

        with pytest.raises(ForeignTenantAccessError):
            helper.create_for_current_tenant(
                ProductVariant, {"product_id": product.id, "sku": "CAM-P"}
            )

        assert db_session.query(ProductVariant).count() == 0

    def test_two_hop_create_with_foreign_grandparent(self, db_session, helper, store_b):
        receipt = GoodsReceiptFactory(store=store_b)
        variant = ProductVariantFactory()

        with pytest.raises(ForeignTenantAccessError):
            helper.create_for_current_tenant(
                GoodsReceiptItem,
                {
                    "goods_receipt_id": receipt.id,
                    "product_variant_id": variant.id,
                    "quantity": 2,
                },
            )

        assert db_session.query(GoodsReceiptItem).count() == 0

    def test_parent_scoped_create_without_parent(self, helper):
        with pytest.raises(ValidationError):
            helper.create_for_current_tenant(ProductVariant, {"sku": "ORFAO"})

    def test_invalid_payload_is_wrapped(self, helper):
        with pytest.raises(RepositoryError) as exc_info:
            helper.create_for_current_tenant(Store, {"name": "X", "not_a_column": 1})

        assert exc_info.value.error_code == ErrorCode.DATABASE_ERROR
        assert isinstance(exc_info.value.cause, TypeError)

    def test_commit_failure_rolls_back(self, db_session, helper):
        with patch.object(db_session, "commit", side_effect=RuntimeError("disk full")):
            with pytest.raises(RepositoryError):
                helper.create_for_current_tenant(Store, {"name": "Filial"})

        assert db_session.query(Store).count() == 0


class TestUpdate:
    def test_update_ignores_tenant_id(self, db_session, helper, store_a, tenant_a, tenant_b):
        result = helper.update_for_current_tenant(
            store_a, {"name": "Renomeada", "tenant_id": tenant_b.id}
        )

        db_session.expire_all()
        assert result is True
        assert store_a.name == "Renomeada"
        assert store_a.tenant_id == tenant_a.id

    def test_update_foreign_entity(self, db_session, helper, store_b):
        original_name = store_b.name

        with pytest.raises(ForeignTenantAccessError):
            helper.update_for_current_tenant(store_b, {"name": "Invadida"})

        db_session.expire_all()
        assert store_b.name == original_name

    def test_update_without_context(self, helper, principal_holder, store_a):
        principal_holder.principal = None

        with pytest.raises(NoTenantContextError):
            helper.update_for_current_tenant(store_a, {"name": "Y"})

    def test_moving_child_to_foreign_parent_is_rejected(
        self, db_session, helper, tenant_a, tenant_b
    ):
        own_product = ProductFactory(tenant=tenant_a)
        foreign_product = ProductFactory(tenant=tenant_b)
        variant = ProductVariantFactory(product=own_product)

        with pytest.raises(ForeignTenantAccessError):
            helper.update_for_current_tenant(variant, {"product_id": foreign_product.id})

        db_session.expire_all()
        assert variant.product_id == own_product.id

    def test_reassigning_foreign_parent_object_is_rejected(
        self, db_session, helper, tenant_a, tenant_b
    ):
        own_product = ProductFactory(tenant=tenant_a)
        foreign_product = ProductFactory(tenant=tenant_b)
        variant = ProductVariantFactory(product=own_product)

        with pytest.raises(ForeignTenantAccessError):
            helper.update_for_current_tenant(variant, {"product": foreign_product})

        db_session.expire_all()
        assert variant.product_id == own_product.id

    def test_moving_child_between_own_parents(self, db_session, helper, tenant_a):
        first = ProductFactory(tenant=tenant_a)
        second = ProductFactory(tenant=tenant_a)
        variant = ProductVariantFactory(product=first)

        assert helper.update_for_current_tenant(variant, {"product_id": second.id}) is True

        db_session.expire_all()
        assert variant.product_id == second.id


class TestDelete:
    def test_soft_delete(self, db_session, helper, store_a):
        assert helper.delete_for_current_tenant(store_a) is True

        assert store_a.deleted_at is not None
        assert helper.query_for_current_tenant(Store).count() == 0
        assert db_session.query(Store).count() == 1

    def test_hard_delete(self, db_session, helper, tenant_a):
        supplier = SupplierFactory(tenant=tenant_a)

        assert helper.delete_for_current_tenant(supplier) is True

        assert db_session.query(Supplier).count() == 0

    def test_delete_foreign_entity(self, db_session, helper, store_b):
        with pytest.raises(ForeignTenantAccessError):
            helper.delete_for_current_tenant(store_b)

        db_session.expire_all()
        assert store_b.deleted_at is None

    def test_delete_without_context(self, helper, principal_holder, store_a):
        principal_holder.principal = None

        with pytest.raises(NoTenantContextError):
            helper.delete_for_current_tenant(store_a)


class TestReads:
    def test_find(self, helper, store_a, store_b):
        assert helper.find_for_current_tenant(Store, store_a.id).id == store_a.id
        assert helper.find_for_current_tenant(Store, store_b.id) is None
        assert helper.find_for_current_tenant(Store, 987654) is None

    def test_find_without_context(self, helper, principal_holder, store_a):
        principal_holder.principal = None

        assert helper.find_for_current_tenant(Store, store_a.id) is None

    def test_query_without_context_is_empty(self, helper, principal_holder, store_a):
        principal_holder.principal = None

        assert helper.query_for_current_tenant(Store).all() == []

    def test_query_can_be_refined(self, helper, tenant_a, tenant_b):
        ProductFactory(tenant=tenant_a, name="camiseta")
        ProductFactory(tenant=tenant_a, name="bermuda")
        ProductFactory(tenant=tenant_b, name="camiseta")

        rows = helper.query_for_current_tenant(Product).filter(Product.name == "camiseta").all()

        assert len(rows) == 1
        assert rows[0].tenant_id == tenant_a.id


class TestRunAs:
    def test_create_as_other_tenant(self, helper, tenant_a, tenant_b):
        store = helper.run_as(
            tenant_b.id, lambda: helper.create_for_current_tenant(Store, {"name": "Filial B"})
        )

        assert store.tenant_id == tenant_b.id
        assert helper.current_tenant_id() == tenant_a.id

    def test_context_shortcuts(self, helper, tenant_a):
        assert helper.has_context() is False

        assert helper.current_tenant().id == tenant_a.id
        assert helper.has_context() is True

        helper.clear_context()
        assert helper.resolver.store.get() is None

        assert helper.refresh_context().id == tenant_a.id

    def test_rows_created_under_run_as_are_scoped(self, helper, tenant_b):
        helper.run_as(tenant_b.id, lambda: StoreFactory(tenant=tenant_b))

        assert helper.query_for_current_tenant(Store).count() == 0
        assert helper.run_as(
            tenant_b.id, lambda: helper.query_for_current_tenant(Store).count()
        ) == 1
