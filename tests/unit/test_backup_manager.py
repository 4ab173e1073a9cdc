"""
Unit tests for catalog snapshots and retention.
"""

import json
import os
from datetime import datetime, timedelta, timezone

import pytest

from inventory_sync.backup import BackupManager, parse_snapshot_name
from inventory_sync.core.models import CanonicalProduct

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def products():
    return [
        CanonicalProduct(product_id="NJ-1", name="Ring"),
        CanonicalProduct(product_id="NJ-2", name="Necklace"),
    ]


class TestBackupManager:
    """Tests for BackupManager"""

    def test_snapshot_contents(self, tmp_path, products):
        manager = BackupManager(tmp_path, clock=lambda: T0)
        path = manager.create_snapshot(products, run_id="run-1")

        assert path.name == "inventory-backup-20250301T100000000000Z.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["total_products"] == 2
        assert data["run_id"] == "run-1"
        assert data["products"][0]["productId"] == "NJ-1"

    def test_same_instant_never_overwrites(self, tmp_path, products):
        manager = BackupManager(tmp_path, clock=lambda: T0)

        first = manager.create_snapshot(products)
        second = manager.create_snapshot(products[:1])

        assert first != second
        assert len(manager.list_snapshots()) == 2
        assert json.loads(first.read_text(encoding="utf-8"))["total_products"] == 2

    def test_labelled_snapshot_name_parses(self, tmp_path, products):
        manager = BackupManager(tmp_path, clock=lambda: T0)
        path = manager.create_snapshot(products, label="pre-restore")

        info = parse_snapshot_name(path)
        assert info.label == "pre-restore"
        assert info.taken_at == T0

    def test_unrelated_files_ignored(self, tmp_path):
        (tmp_path / "notes.json").write_text("{}", encoding="utf-8")
        (tmp_path / "inventory-backup-latest.json").write_text("{}", encoding="utf-8")

        assert BackupManager(tmp_path).list_snapshots() == []

    def test_retention_count(self, tmp_path, products):
        """Test that N+1 snapshots are pruned back to the newest N"""
        clock = Clock(T0)
        manager = BackupManager(tmp_path, retention_count=3, clock=clock)
        created = []
        for minute in range(4):
            clock.now = T0 + timedelta(minutes=minute)
            created.append(manager.create_snapshot(products))

        deleted = manager.prune()

        assert deleted == [created[0]]
        assert [s.path for s in manager.list_snapshots()] == created[:0:-1]

    def test_retention_age_keeps_newest(self, tmp_path, products):
        clock = Clock(T0 - timedelta(days=60))
        manager = BackupManager(tmp_path, retention_count=10, retention_days=30, clock=clock)
        oldest = manager.create_snapshot(products)
        clock.now = T0 - timedelta(days=45)
        newest = manager.create_snapshot(products)

        clock.now = T0
        deleted = manager.prune()

        assert deleted == [oldest]
        assert [s.path for s in manager.list_snapshots()] == [newest]

    def test_unwritable_directory_returns_none(self, tmp_path, products):
        blocker = tmp_path / "backups"
        blocker.write_text("not a directory", encoding="utf-8")

        assert BackupManager(blocker).create_snapshot(products) is None

    def test_load_snapshot_by_name(self, tmp_path, products, monkeypatch):
        manager = BackupManager(tmp_path / "backups", clock=lambda: T0)
        path = manager.create_snapshot(products)
        monkeypatch.chdir(tmp_path)

        snapshot = manager.load_snapshot(path.name)

        assert snapshot.total_products == 2
        assert [p.product_id for p in snapshot.products] == ["NJ-1", "NJ-2"]

    def test_retention_count_must_be_positive(self, tmp_path):
        with pytest.raises(ValueError):
            BackupManager(tmp_path, retention_count=0)


def test_snapshot_listing_is_newest_first(tmp_path, products):
    clock = Clock(T0)
    manager = BackupManager(tmp_path, clock=clock)
    older = manager.create_snapshot(products)
    clock.now = T0 + timedelta(seconds=1)
    newer = manager.create_snapshot(products)
    os.utime(older)

    assert [s.path for s in manager.list_snapshots()] == [newer, older]
