"""
Catalog snapshots and retention.
"""

from .backup_manager import BackupManager, BackupSnapshot, SnapshotInfo, parse_snapshot_name

__all__ = ["BackupManager", "BackupSnapshot", "SnapshotInfo", "parse_snapshot_name"]
