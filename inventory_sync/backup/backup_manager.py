"""
Timestamped JSON snapshots of the full catalog, with retention.

Snapshot failures never fail a sync: they are logged and reported as None.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel

from inventory_sync import __version__
from inventory_sync.core.errors import OutputTargetError
from inventory_sync.core.models import CanonicalProduct
from inventory_sync.core.models.sync_run import utc_now
from inventory_sync.observability.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_PREFIX = "inventory-backup-"
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"
_SNAPSHOT_NAME = re.compile(
    rf"^{SNAPSHOT_PREFIX}(?:(?P<label>[a-z][a-z-]*)-)?(?P<ts>\d{{8}}T\d{{12}}Z)\.json$"
)


class SnapshotInfo(BaseModel):
    path: Path
    taken_at: datetime
    label: str | None = None


class BackupSnapshot(BaseModel):
    """Contents of one snapshot file."""

    timestamp: datetime
    version: str
    run_id: str | None = None
    label: str | None = None
    total_products: int
    products: list[CanonicalProduct]


def parse_snapshot_name(path: Path) -> SnapshotInfo | None:
    match = _SNAPSHOT_NAME.match(path.name)
    if not match:
        return None
    taken_at = datetime.strptime(match.group("ts"), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return SnapshotInfo(path=path, taken_at=taken_at, label=match.group("label"))


class BackupManager:
    """
    Creates, prunes, lists and restores catalog snapshots.

    Args:
        backup_dir: Directory holding inventory-backup-*.json files
        retention_count: Newest snapshots to keep
        retention_days: Snapshots older than this are deleted (the newest
            snapshot is always kept)
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        backup_dir: str | Path,
        retention_count: int = 10,
        retention_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        if retention_count < 1:
            raise ValueError("retention_count must be at least 1")
        self.backup_dir = Path(backup_dir)
        self.retention_count = retention_count
        self.retention_days = retention_days
        self.clock = clock

    def create_snapshot(
        self,
        products: list[CanonicalProduct],
        run_id: str | None = None,
        label: str | None = None,
    ) -> Path | None:
        """
        Write a snapshot of ``products``.

        Existing files are never overwritten. Returns the new path, or None
        when the snapshot could not be written.
        """
        now = self.clock()
        snapshot = {
            "timestamp": now.isoformat(),
            "version": __version__,
            "run_id": run_id,
            "label": label,
            "total_products": len(products),
            "products": [product.to_document() for product in products],
        }

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self._write_new(now, label, snapshot)
        except OSError as e:
            logger.error(f"Backup snapshot failed: {e}", extra={"backup_dir": str(self.backup_dir)})
            return None

        logger.info(
            f"Backup snapshot created: {path.name}",
            extra={"snapshot": str(path), "total_products": len(products), "run_id": run_id},
        )
        return path

    def _write_new(self, now: datetime, label: str | None, snapshot: dict[str, Any]) -> Path:
        stamp = now.astimezone(timezone.utc)
        while True:
            name = SNAPSHOT_PREFIX + (f"{label}-" if label else "") + stamp.strftime(TIMESTAMP_FORMAT) + ".json"
            path = self.backup_dir / name
            try:
                with open(path, "x", encoding="utf-8") as f:
                    json.dump(snapshot, f, indent=2, ensure_ascii=False)
                return path
            except FileExistsError:
                stamp += timedelta(microseconds=1)

    def list_snapshots(self) -> list[SnapshotInfo]:
        """Snapshots newest first."""
        if not self.backup_dir.is_dir():
            return []
        snapshots = [
            info for info in (parse_snapshot_name(p) for p in self.backup_dir.glob(f"{SNAPSHOT_PREFIX}*.json"))
            if info is not None
        ]
        return sorted(snapshots, key=lambda s: s.taken_at, reverse=True)

    def prune(self) -> list[Path]:
        """
        Apply retention. Returns the deleted paths.

        Deletion failures are logged and the file is left in place.
        """
        cutoff = self.clock() - timedelta(days=self.retention_days)
        deleted: list[Path] = []

        for index, info in enumerate(self.list_snapshots()):
            too_many = index >= self.retention_count
            too_old = index > 0 and info.taken_at < cutoff
            if not (too_many or too_old):
                continue
            try:
                info.path.unlink()
                deleted.append(info.path)
            except OSError as e:
                logger.warning(f"Could not delete old backup {info.path.name}: {e}")

        if deleted:
            logger.info(
                f"Pruned {len(deleted)} old backups",
                extra={"deleted": [p.name for p in deleted]},
            )
        return deleted

    def load_snapshot(self, path: str | Path) -> BackupSnapshot:
        """
        Read a snapshot file.

        Raises:
            FileNotFoundError: The snapshot does not exist
            ValueError: The file is not a valid snapshot
        """
        path = Path(path)
        if not path.is_absolute() and not path.exists():
            path = self.backup_dir / path
        with open(path, encoding="utf-8") as f:
            return BackupSnapshot.model_validate(json.load(f))

    def restore(self, path: str | Path, store, projection, materializer) -> BackupSnapshot:
        """
        Restore the catalog from a snapshot.

        The current catalog is snapshotted first (label "pre-restore"), then
        the store is replaced and the projection regenerated.

        Args:
            path: Snapshot to restore
            store: Open ProductStore
            projection: ProjectionWriter
            materializer: ViewMaterializer used to rebuild the projection
        """
        snapshot = self.load_snapshot(path)

        pre_restore = self.create_snapshot(store.all_products(), label="pre-restore")
        if pre_restore is None:
            raise OutputTargetError("Could not snapshot the current catalog before restoring")

        store.replace_all(snapshot.products)
        products = store.all_products()
        projection.write(materializer.to_document(materializer.materialize(products)))

        logger.info(
            f"Restored {len(products)} products from {Path(path).name}",
            extra={"snapshot": str(path), "pre_restore": str(pre_restore)},
        )
        return snapshot
