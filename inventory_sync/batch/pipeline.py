"""
Sync pipeline orchestration.

Coordinates the flow: read → validate → classify → upsert → materialize → back up

The orchestrator is a state machine over SyncStage. Row-level problems
become diagnostics on the SyncRun and never stop the run; a SyncError at any
stage finalizes the run as FAILED and leaves already-committed writes alone.
"""

from pathlib import Path

import psycopg

from inventory_sync.backup import BackupManager
from inventory_sync.batch.readers import SpreadsheetReader
from inventory_sync.core.builder import BuiltRecord, RecordBuilder
from inventory_sync.core.config import PipelineConfig
from inventory_sync.core.errors import (
    NoValidRowsError,
    PipelineError,
    RecordBuildError,
    StoreUnavailableError,
    SyncError,
)
from inventory_sync.core.mapping import HeaderMapper
from inventory_sync.core.models import RowDiagnostic, SourceRow, SyncRun, SyncStage, SyncStatus
from inventory_sync.core.validators import RowValidator, find_duplicates
from inventory_sync.observability import metrics
from inventory_sync.observability.logger import bound_run, get_logger, log_operation
from inventory_sync.views import ViewMaterializer
from inventory_sync.warehouse import (
    DatabaseConnectionPool,
    DocumentProductStore,
    JsonlRunLog,
    PostgresProductStore,
    PostgresRunLog,
    ProductStore,
    ProjectionWriter,
    RunLog,
)

logger = get_logger(__name__)


class SyncOrchestrator:
    """
    Runs one inventory sync end to end.

    Flow:
    1. READING: read the spreadsheet, map headers
    2. VALIDATING: drop blank, marker and incomplete rows; resolve duplicates
    3. CLASSIFYING: build canonical records (coercion, classifier, pricing)
    4. UPSERTING: snapshot the current catalog, then merge every record
    5. MATERIALIZING: regenerate the projection from the full store
    6. BACKING_UP: apply snapshot retention
    """

    def __init__(
        self,
        config: PipelineConfig,
        store: ProductStore,
        run_log: RunLog,
        reader: SpreadsheetReader | None = None,
        mapper: HeaderMapper | None = None,
        validator: RowValidator | None = None,
        builder: RecordBuilder | None = None,
        materializer: ViewMaterializer | None = None,
        projection: ProjectionWriter | None = None,
        backups: BackupManager | None = None,
    ):
        """
        Initialize the orchestrator.

        Components not passed in are built from ``config``.

        Args:
            config: Pipeline configuration
            store: Authoritative product store (opened and closed per run)
            run_log: Where SyncRun records are persisted
        """
        self.config = config
        self.store = store
        self.run_log = run_log

        self.reader = reader or SpreadsheetReader()
        self.mapper = mapper or HeaderMapper(config.header_synonyms)
        self.validator = validator or RowValidator(
            RowValidator.default_rules(config.row_rules.model_dump())
        )
        self.builder = builder or RecordBuilder(
            pricing=config.pricing,
            color_keywords=config.classifier.color_keywords,
            size_keywords=config.classifier.size_keywords,
            default_brand=config.catalog.default_brand,
            image_prefix=config.catalog.image_prefix,
            delimiter=config.classifier.delimiter,
        )
        self.materializer = materializer or ViewMaterializer(config.views)
        self.projection = projection or ProjectionWriter(config.paths.projection_path)
        self.backups = backups or BackupManager(
            config.paths.backup_path,
            retention_count=config.backup.retention_count,
            retention_days=config.backup.retention_days,
        )

    @classmethod
    def from_config(
        cls, config: PipelineConfig, pool: DatabaseConnectionPool | None = None
    ) -> "SyncOrchestrator":
        """
        Wire the store and run log for the configured mode.

        Relational mode needs ``pool``; document mode ignores it.
        """
        if config.mode == "relational":
            if pool is None:
                raise ValueError("Relational mode requires a database connection pool")
            return cls(config, PostgresProductStore(pool), PostgresRunLog(pool))
        return cls(
            config,
            DocumentProductStore(config.paths.store_path),
            JsonlRunLog(config.paths.run_log_path),
        )

    def run(self, source_path: str | Path | None = None, dry_run: bool = False) -> SyncRun:
        """
        Execute one sync.

        Args:
            source_path: Spreadsheet to read (defaults to the configured source)
            dry_run: Stop after CLASSIFYING without writing anything

        Returns:
            The finalized SyncRun (COMPLETED or FAILED)
        """
        source = Path(source_path) if source_path else self.config.paths.source_file
        run = SyncRun(source_file=str(source), mode=self.store.mode, dry_run=dry_run)
        logger.info(
            f"Starting sync run {run.run_id} from {source}",
            extra={"run_id": run.run_id, "mode": run.mode, "dry_run": dry_run},
        )

        with bound_run(run.run_id):
            try:
                with self.store:
                    self._record_start(run)
                    try:
                        self._execute(run, source, dry_run)
                        run.complete()
                    except SyncError as e:
                        self._fail(run, e)
                    except Exception as e:
                        self._fail(run, e)
                        self._record_finish(run)
                        raise
                    self._record_finish(run)
            except StoreUnavailableError as e:
                if not run.is_finalized:
                    self._fail(run, e)
                    self._record_unopened(run)

        metrics.record_sync_run(run)
        level = logger.info if run.status == SyncStatus.COMPLETED else logger.error
        level(
            f"Sync run {run.run_id} {run.summary()}",
            extra={"run_id": run.run_id, "status": run.status.value, "stage": run.stage.value},
        )
        return run

    def _execute(self, run: SyncRun, source: Path, dry_run: bool) -> None:
        run.advance(SyncStage.READING)
        with log_operation("Reading source", logger=logger):
            if not dry_run:
                self.projection.check_writable()
            rows = self._read(run, source)

        run.advance(SyncStage.VALIDATING)
        valid_rows = self._validate(run, rows)

        run.advance(SyncStage.CLASSIFYING)
        records = self._build(run, valid_rows)
        if dry_run:
            logger.info(f"Dry run: {len(records)} records ready, nothing written")
            return

        run.advance(SyncStage.UPSERTING)
        with log_operation("Upserting records", logger=logger):
            self._upsert(run, records)

        run.advance(SyncStage.MATERIALIZING)
        with log_operation("Materializing views", logger=logger):
            products = self.store.all_products()
            views = self.materializer.materialize(products)
            self.projection.write(self.materializer.to_document(views))
            metrics.catalog_products.set(len(products))

        run.advance(SyncStage.BACKING_UP)
        self.backups.prune()
        metrics.backup_snapshots.set(len(self.backups.list_snapshots()))

    def _read(self, run: SyncRun, source: Path) -> list[SourceRow]:
        sheet = self.reader.read(source)
        mapping = self.mapper.map_headers(sheet.headers)
        for field in mapping.missing_required:
            run.diagnostics.append(RowDiagnostic(
                rule="missing_column",
                message=f"No column maps to required field '{field}'",
                severity="warning",
            ))

        rows = [mapping.to_source_row(number, cells) for number, cells in sheet.rows]
        rows = [row for row in rows if not row.is_blank()]
        run.rows_read = len(rows)
        return rows

    def _validate(self, run: SyncRun, rows: list[SourceRow]) -> list[SourceRow]:
        valid, skipped = self.validator.partition(rows)
        kept, duplicates = find_duplicates(valid)
        run.diagnostics.extend(skipped)
        run.diagnostics.extend(duplicates)
        run.rows_skipped = len(skipped) + len(duplicates)
        run.rows_valid = len(kept)
        return kept

    def _build(self, run: SyncRun, rows: list[SourceRow]) -> list[tuple[SourceRow, BuiltRecord]]:
        records = []
        for row in rows:
            try:
                records.append((row, self.builder.build(row)))
            except RecordBuildError as e:
                run.rows_valid -= 1
                run.rows_skipped += 1
                run.diagnostics.append(RowDiagnostic(
                    row_number=row.row_number,
                    product_id=row.product_id or None,
                    rule="record_build",
                    message=str(e),
                ))

        if not records:
            raise NoValidRowsError(f"No valid product rows in {run.source_file}")
        return records

    def _upsert(self, run: SyncRun, records: list[tuple[SourceRow, BuiltRecord]]) -> None:
        try:
            current = self.store.all_products()
        except (psycopg.Error, PipelineError) as e:
            raise StoreUnavailableError(f"Cannot read current catalog: {e}") from e

        snapshot = self.backups.create_snapshot(current, run_id=run.run_id)
        run.snapshot_path = str(snapshot) if snapshot else None

        result = self.store.upsert_batch(built for _, built in records)
        run.inserted = len(result.inserted)
        run.updated = len(result.updated)
        run.failed = len(result.failures)

        rows_by_id = {built.product_id: row for row, built in records}
        for product_id, message in result.failures.items():
            run.diagnostics.append(RowDiagnostic(
                row_number=rows_by_id[product_id].row_number if product_id in rows_by_id else None,
                product_id=product_id,
                rule="store_write",
                message=message,
            ))

    def _fail(self, run: SyncRun, error: Exception) -> None:
        if isinstance(error, SyncError):
            error.stage = run.stage.value
        run.fail(str(error))
        logger.error(
            f"Sync run {run.run_id} failed during {run.stage.value}: {error}",
            extra={"run_id": run.run_id, "stage": run.stage.value, "error_type": type(error).__name__},
        )

    def _record_start(self, run: SyncRun) -> None:
        try:
            self.run_log.start(run)
        except (psycopg.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot record sync run: {e}") from e

    def _record_finish(self, run: SyncRun) -> None:
        try:
            self.run_log.finish(run)
        except (psycopg.Error, OSError) as e:
            logger.error(
                f"Could not record the outcome of sync run {run.run_id}: {e}",
                extra={"run_id": run.run_id, "status": run.status.value},
            )
            raise

    def _record_unopened(self, run: SyncRun) -> None:
        """Log a run that failed before the store could be opened."""
        try:
            self.run_log.start(run)
            self.run_log.finish(run)
        except (psycopg.Error, OSError) as e:
            logger.error(
                f"Could not record failed sync run {run.run_id}: {e}",
                extra={"run_id": run.run_id, "status": run.status.value},
            )
