"""
Prometheus metrics collection for inventory-sync

Sync and report runs are short-lived batch jobs, so metrics live in a
dedicated registry and are exported to a textfile (node-exporter textfile
collector) at the end of a run rather than served over HTTP.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# SYNC PIPELINE METRICS
# =======================

# Source rows by outcome
sync_rows_total = Counter(
    name="inventory_sync_rows_total",
    documentation="Spreadsheet rows processed by the sync pipeline",
    labelnames=["outcome"],  # outcome: valid, skipped
    registry=REGISTRY,
)

# Store writes by outcome
sync_writes_total = Counter(
    name="inventory_sync_writes_total",
    documentation="Product upserts applied to the authoritative store",
    labelnames=["mode", "outcome"],  # outcome: inserted, updated, failed
    registry=REGISTRY,
)

# Validation failures counter
validation_failures_total = Counter(
    name="inventory_sync_validation_failures_total",
    documentation="Rows skipped by a validation rule",
    labelnames=["rule"],
    registry=REGISTRY,
)

# Completed runs by terminal status
sync_runs_total = Counter(
    name="inventory_sync_runs_total",
    documentation="Sync runs by terminal status",
    labelnames=["status"],  # status: COMPLETED, FAILED
    registry=REGISTRY,
)

# Run duration
sync_duration_seconds = Histogram(
    name="inventory_sync_duration_seconds",
    documentation="Wall-clock duration of a sync run",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=REGISTRY,
)

# Catalog size after the last run
catalog_products = Gauge(
    name="inventory_sync_catalog_products",
    documentation="Products in the authoritative store after the last write pass",
    registry=REGISTRY,
)

# Backup snapshots retained
backup_snapshots = Gauge(
    name="inventory_sync_backup_snapshots",
    documentation="Backup snapshots retained after pruning",
    registry=REGISTRY,
)

# =======================
# REPORT METRICS
# =======================

reports_generated_total = Counter(
    name="inventory_reports_generated_total",
    documentation="Order-book workbooks generated",
    labelnames=["status"],  # status: success, empty, failure
    registry=REGISTRY,
)

report_orders = Gauge(
    name="inventory_report_orders",
    documentation="Orders included in the last generated workbook",
    registry=REGISTRY,
)

report_artifacts_pruned_total = Counter(
    name="inventory_report_artifacts_pruned_total",
    documentation="Dated order-book artifacts deleted by retention",
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def export_metrics(path: str) -> None:
    """
    Write the registry to a textfile for the node-exporter collector.

    Args:
        path: Destination .prom file
    """
    write_to_textfile(path, REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def record_sync_run(run) -> None:
    """
    Record the counters of a finalized SyncRun.

    Args:
        run: Finalized SyncRun
    """
    increment_counter(sync_rows_total, run.rows_valid, outcome="valid")
    increment_counter(sync_rows_total, run.rows_skipped, outcome="skipped")
    increment_counter(sync_writes_total, run.inserted, mode=run.mode, outcome="inserted")
    increment_counter(sync_writes_total, run.updated, mode=run.mode, outcome="updated")
    increment_counter(sync_writes_total, run.failed, mode=run.mode, outcome="failed")
    for diagnostic in run.diagnostics:
        increment_counter(validation_failures_total, rule=diagnostic.rule)
    increment_counter(sync_runs_total, status=run.status.value)

    if run.finished_at is not None:
        sync_duration_seconds.observe((run.finished_at - run.started_at).total_seconds())
