"""
Unit tests for Pydantic data models.

Tests the catalog, run and order models for validation and serialization.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from inventory_sync.core.models import (
    CanonicalProduct,
    OrderRecord,
    RowDiagnostic,
    SourceRow,
    SyncRun,
    SyncStage,
    SyncStatus,
)


class TestCanonicalProduct:
    """Tests for CanonicalProduct model"""

    def test_empty_identifier_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CanonicalProduct(product_id="", name="Ring")
        assert "product_id" in str(exc_info.value)

    def test_more_than_four_images_rejected(self):
        with pytest.raises(ValidationError):
            CanonicalProduct(product_id="NJ-1", name="Ring", images=["a", "b", "c", "d", "e"])

    def test_document_round_trip(self):
        """Test that the camelCase document parses back to the same product"""
        product = CanonicalProduct(
            product_id="NJ-1", name="Ring", original_price=1875, is_sale=True,
            date_added=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        document = product.to_document()

        assert document["productId"] == "NJ-1"
        assert document["originalPrice"] == 1875
        assert CanonicalProduct.model_validate(document) == product

    def test_checksum_ignores_timestamps(self):
        first = CanonicalProduct(product_id="NJ-1", name="Ring", last_updated=datetime(2025, 1, 1))
        second = CanonicalProduct(product_id="NJ-1", name="Ring", last_updated=datetime(2025, 2, 1))
        changed = CanonicalProduct(product_id="NJ-1", name="Ring", price=10)

        assert first.checksum() == second.checksum()
        assert first.checksum() != changed.checksum()


class TestSourceRow:
    """Tests for SourceRow model"""

    def test_text_trims_and_handles_none(self):
        row = SourceRow(row_number=2, values={"product_id": "  NJ-1 ", "name": None})

        assert row.product_id == "NJ-1"
        assert row.name == ""
        assert not row.is_blank()

    def test_blank_row(self):
        assert SourceRow(row_number=2, values={"product_id": None, "name": " "}).is_blank()

    def test_row_number_starts_at_one(self):
        with pytest.raises(ValidationError):
            SourceRow(row_number=0)


class TestSyncRun:
    """Tests for SyncRun lifecycle"""

    def test_new_run_is_running(self):
        run = SyncRun(source_file="catalog.xlsx")

        assert run.status == SyncStatus.RUNNING
        assert run.stage == SyncStage.INIT
        assert not run.is_finalized

    def test_complete_summary_counts_errors_only(self):
        run = SyncRun(source_file="catalog.xlsx", inserted=9, rows_skipped=2)
        run.diagnostics = [
            RowDiagnostic(row_number=5, rule="required_field", message="name: Cell is empty"),
            RowDiagnostic(row_number=6, rule="sentinel_row", message="Comment row", severity="warning"),
        ]
        run.complete()

        assert run.status == SyncStatus.COMPLETED
        assert run.finished_at is not None
        assert run.error_count == 1
        assert run.summary().startswith("completed with 1 errors")

    def test_fail_keeps_running_stage(self):
        run = SyncRun(source_file="catalog.xlsx")
        run.advance(SyncStage.READING)
        run.fail("Source file not found: catalog.xlsx")

        assert run.status == SyncStatus.FAILED
        assert run.stage == SyncStage.READING
        assert run.summary() == "failed to run during READING: Source file not found: catalog.xlsx"

    def test_finalized_run_is_immutable(self):
        run = SyncRun(source_file="catalog.xlsx")
        run.complete()

        with pytest.raises(RuntimeError):
            run.advance(SyncStage.UPSERTING)
        with pytest.raises(RuntimeError):
            run.fail("late failure")

    def test_diagnostic_str(self):
        diagnostic = RowDiagnostic(row_number=5, product_id="NJ-5", rule="required_field", message="name: Cell is empty")
        assert str(diagnostic) == "Row 5 [NJ-5]: name: Cell is empty (required_field)"


class TestOrderRecord:
    """Tests for OrderRecord model"""

    def test_parses_storefront_order(self):
        order = OrderRecord.model_validate(OrderRecord.model_config["json_schema_extra"]["example"])

        assert order.order_id == "NJ1700000000000"
        assert order.placed_at == datetime(2025, 3, 1, 10, 15, tzinfo=timezone.utc)
        assert order.region == "Maharashtra"
        assert order.city == "Pune"
        assert order.items_text() == "Pearl Drop Earrings (Qty: 1, ₹2500)"

    def test_defaults_and_fallbacks(self):
        order = OrderRecord.model_validate({
            "orderId": "NJ1",
            "customerEmail": None,
            "paymentStatus": "",
            "orderStatus": None,
            "orderDate": "2025-03-01T08:00:00",
            "shippingAddress": {"address": "1 Main St", "city": "Goa", "pincode": 403001},
        })

        assert order.customer_email == ""
        assert order.payment_status == "pending"
        assert order.order_status == "processing"
        assert order.placed_at.tzinfo == timezone.utc
        assert order.region == "Unknown"
        assert order.shipping_address.pincode == "403001"

    def test_order_id_required(self):
        with pytest.raises(ValidationError):
            OrderRecord.model_validate({"totalAmount": 100})
