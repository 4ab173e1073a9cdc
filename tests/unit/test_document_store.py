"""
Unit tests for the document product store and the merge rules shared by
both store backends.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from inventory_sync.core.builder import BuiltRecord, RecordBuilder
from inventory_sync.core.errors import StoreUnavailableError
from inventory_sync.core.models import CanonicalProduct, SourceRow
from inventory_sync.warehouse import DocumentProductStore, UpsertOutcome, merge_product

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def tick(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def builder(clock):
    return RecordBuilder(clock=clock)


def build(builder, row_number=2, **values):
    return builder.build(SourceRow(row_number=row_number, values=values))


class TestMergeProduct:
    """Tests for merge_product"""

    def test_only_supplied_fields_overwrite(self):
        existing = CanonicalProduct(product_id="NJ-1", name="Ring", material="Silver", price=900,
                                    date_added=T0, last_updated=T0)
        built = BuiltRecord(
            product=CanonicalProduct(product_id="NJ-1", name="Ring v2", price=1000),
            supplied_fields={"product_id", "name", "price"},
        )
        later = T0 + timedelta(days=1)

        merged = merge_product(existing, built, later)

        assert merged.name == "Ring v2"
        assert merged.price == 1000
        assert merged.material == "Silver"
        assert merged.date_added == T0
        assert merged.last_updated == later


class TestDocumentProductStore:
    """Tests for DocumentProductStore"""

    def test_insert_then_update(self, tmp_path, builder, clock):
        path = tmp_path / "products.json"

        with DocumentProductStore(path, clock=clock) as store:
            first = store.upsert_batch([build(builder, product_id="NJ-1", name="Ring", material="Silver")])
        clock.tick(hours=1)
        with DocumentProductStore(path, clock=clock) as store:
            second = store.upsert_batch([build(builder, product_id="NJ-1", name="Ring v2")])
            product = store.get("NJ-1")

        assert first.inserted == ["NJ-1"]
        assert second.updated == ["NJ-1"]
        assert product.name == "Ring v2"
        assert product.material == "Silver"
        assert product.date_added == T0
        assert product.last_updated == T0 + timedelta(hours=1)

    def test_resync_is_idempotent(self, tmp_path, builder, clock):
        """Test that a second sync of the same rows leaves content unchanged"""
        path = tmp_path / "products.json"
        rows = [dict(product_id=f"NJ-{i}", name=f"Ring {i}", category="Rings") for i in range(3)]

        with DocumentProductStore(path, clock=clock) as store:
            store.upsert_batch([build(builder, **row) for row in rows])
            before = {p.product_id: p.checksum() for p in store.all_products()}
        clock.tick(days=1)
        with DocumentProductStore(path, clock=clock) as store:
            result = store.upsert_batch([build(builder, **row) for row in rows])
            after = {p.product_id: p.checksum() for p in store.all_products()}

        assert result.inserted == []
        assert len(result.updated) == 3
        assert before == after

    def test_document_is_keyed_and_camel_cased(self, tmp_path, builder, clock):
        path = tmp_path / "products.json"
        with DocumentProductStore(path, clock=clock) as store:
            store.upsert(build(builder, product_id="NJ-2", name="B"))
            store.upsert(build(builder, product_id="NJ-1", name="A"))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert list(document) == ["NJ-1", "NJ-2"]
        assert document["NJ-1"]["productId"] == "NJ-1"

    def test_upsert_reports_outcome(self, tmp_path, builder, clock):
        with DocumentProductStore(tmp_path / "products.json", clock=clock) as store:
            assert store.upsert(build(builder, product_id="NJ-1", name="A")) == UpsertOutcome.INSERTED
            assert store.upsert(build(builder, product_id="NJ-1", name="B")) == UpsertOutcome.UPDATED

    def test_replace_all(self, tmp_path, clock):
        path = tmp_path / "products.json"
        with DocumentProductStore(path, clock=clock) as store:
            store.replace_all([CanonicalProduct(product_id="NJ-9", name="Restored")])
            assert [p.product_id for p in store.all_products()] == ["NJ-9"]

    def test_corrupt_document_is_unavailable(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreUnavailableError):
            with DocumentProductStore(path):
                pass

    def test_use_outside_context_raises(self, tmp_path):
        with pytest.raises(RuntimeError, match="not open"):
            DocumentProductStore(tmp_path / "products.json").all_products()
