"""
Command-line interface for the inventory sync pipeline.

Usage:
    inventory-sync sync [--source PATH] [--dry-run] [--document-only]
    inventory-sync runs [--limit N]
    inventory-sync backups list
    inventory-sync backups restore <snapshot>
"""

import argparse
import sys
from contextlib import ExitStack

import psycopg

from inventory_sync.backup import BackupManager
from inventory_sync.batch import SyncOrchestrator
from inventory_sync.core.config import PipelineConfig
from inventory_sync.core.errors import PipelineError
from inventory_sync.core.models import SyncStatus
from inventory_sync.observability.logger import get_logger
from inventory_sync.observability.metrics import export_metrics
from inventory_sync.views import ViewMaterializer
from inventory_sync.warehouse import (
    DocumentProductStore,
    JsonlRunLog,
    PostgresProductStore,
    PostgresRunLog,
    ProductStore,
    ProjectionWriter,
    SchemaManager,
)

from .common import add_common_arguments, load_config, make_pool

logger = get_logger(__name__)


def sync_command(args: argparse.Namespace) -> int:
    """
    Run one sync.

    Returns 0 when the run COMPLETED (row errors included), 1 when it FAILED.
    """
    config = load_config(args)
    if args.document_only:
        config.mode = "document"

    logger.info(f"Starting inventory sync ({config.mode} mode)")
    if args.dry_run:
        logger.info("DRY RUN MODE: nothing will be written")

    pool = make_pool(config) if config.mode == "relational" else None
    orchestrator = SyncOrchestrator.from_config(config, pool)
    run = orchestrator.run(source_path=args.source, dry_run=args.dry_run)

    logger.info("=" * 60)
    logger.info(f"SYNC {run.status.value}")
    logger.info("=" * 60)
    logger.info(f"Run ID: {run.run_id}")
    logger.info(f"Source: {run.source_file}")
    logger.info(f"Rows read: {run.rows_read}")
    logger.info(f"Rows valid: {run.rows_valid}")
    logger.info(f"Rows skipped: {run.rows_skipped}")
    logger.info(f"Inserted: {run.inserted}  Updated: {run.updated}  Failed: {run.failed}")
    if run.snapshot_path:
        logger.info(f"Pre-sync snapshot: {run.snapshot_path}")
    for diagnostic in run.diagnostics:
        if diagnostic.severity == "error":
            logger.info(f"  {diagnostic}")
    logger.info("=" * 60)

    if args.metrics_file:
        export_metrics(args.metrics_file)

    if run.status == SyncStatus.COMPLETED:
        logger.info(f"Sync {run.summary()}")
        return 0
    logger.error(f"Sync {run.summary()}")
    return 1


def _open_store(config: PipelineConfig, stack: ExitStack) -> ProductStore:
    if config.mode == "relational":
        pool = stack.enter_context(make_pool(config))
        return stack.enter_context(PostgresProductStore(pool))
    return stack.enter_context(DocumentProductStore(config.paths.store_path))


def runs_command(args: argparse.Namespace) -> int:
    """List recent sync runs."""
    config = load_config(args)

    with ExitStack() as stack:
        if config.mode == "relational":
            pool = stack.enter_context(make_pool(config))
            SchemaManager(pool).ensure_schema()
            runs = PostgresRunLog(pool).recent(args.limit)
        else:
            runs = JsonlRunLog(config.paths.run_log_path).recent(args.limit)

    if not runs:
        logger.info("No sync runs recorded")
        return 0

    logger.info("=" * 60)
    logger.info(f"RECENT SYNC RUNS ({len(runs)})")
    logger.info("=" * 60)
    for run in runs:
        logger.info(
            f"{run.started_at:%Y-%m-%d %H:%M:%S} {run.run_id} {run.status.value:<9} "
            f"{run.mode:<10} {run.summary()}"
        )
    logger.info("=" * 60)
    return 0


def _backup_manager(config: PipelineConfig) -> BackupManager:
    return BackupManager(
        config.paths.backup_path,
        retention_count=config.backup.retention_count,
        retention_days=config.backup.retention_days,
    )


def backups_list_command(args: argparse.Namespace) -> int:
    """List backup snapshots, newest first."""
    config = load_config(args)
    snapshots = _backup_manager(config).list_snapshots()

    if not snapshots:
        logger.info(f"No backups in {config.paths.backup_path}")
        return 0

    logger.info("=" * 60)
    logger.info(f"BACKUPS ({len(snapshots)})")
    logger.info("=" * 60)
    for info in snapshots:
        label = f" [{info.label}]" if info.label else ""
        logger.info(f"{info.taken_at:%Y-%m-%d %H:%M:%S} {info.path.name}{label}")
    logger.info("=" * 60)
    return 0


def backups_restore_command(args: argparse.Namespace) -> int:
    """Restore the catalog from a snapshot (the current catalog is snapshotted first)."""
    config = load_config(args)
    backups = _backup_manager(config)

    with ExitStack() as stack:
        store = _open_store(config, stack)
        snapshot = backups.restore(
            args.snapshot,
            store,
            ProjectionWriter(config.paths.projection_path),
            ViewMaterializer(config.views),
        )

    logger.info(f"Restored {snapshot.total_products} products from {args.snapshot}")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="inventory-sync",
        description="Spreadsheet catalog synchronization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync the configured spreadsheet
  inventory-sync sync

  # Sync a specific file without a database
  inventory-sync sync --source exports/catalog.csv --document-only

  # Validate only, don't write
  inventory-sync sync --dry-run

  # Restore an earlier catalog
  inventory-sync backups restore inventory-backup-20250301T000000000000Z.json
        """
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sync_parser = subparsers.add_parser("sync", help="Synchronize the catalog spreadsheet")
    sync_parser.add_argument(
        "--source",
        help="Spreadsheet to read (default: paths.source_file from the config)"
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read, validate and classify without writing"
    )
    sync_parser.add_argument(
        "--document-only",
        action="store_true",
        help="Use the JSON document store instead of PostgreSQL"
    )
    sync_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this textfile after the run"
    )
    sync_parser.set_defaults(func=sync_command)

    runs_parser = subparsers.add_parser("runs", help="List recent sync runs")
    runs_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of runs to display (default: 20)"
    )
    runs_parser.set_defaults(func=runs_command)

    backups_parser = subparsers.add_parser("backups", help="Manage catalog backups")
    backups_sub = backups_parser.add_subparsers(dest="backup_command", help="Backup commands")
    backups_sub.add_parser("list", help="List backup snapshots").set_defaults(func=backups_list_command)
    restore_parser = backups_sub.add_parser("restore", help="Restore a backup snapshot")
    restore_parser.add_argument("snapshot", help="Snapshot file name or path")
    restore_parser.set_defaults(func=backups_restore_command)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(args.func(args))
    except (PipelineError, ValueError, OSError, psycopg.Error) as e:
        logger.error(f"inventory-sync failed to run: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
