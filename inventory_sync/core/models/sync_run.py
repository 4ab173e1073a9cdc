"""
SyncRun model: audit record of one inventory sync execution.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SyncStage(str, Enum):
    """Orchestrator states, in execution order."""

    INIT = "INIT"
    READING = "READING"
    VALIDATING = "VALIDATING"
    CLASSIFYING = "CLASSIFYING"
    UPSERTING = "UPSERTING"
    MATERIALIZING = "MATERIALIZING"
    BACKING_UP = "BACKING_UP"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class RowDiagnostic(BaseModel):
    """
    A non-fatal problem found while processing one source row or record.

    Attributes:
        row_number: Spreadsheet row (None for store-level diagnostics)
        product_id: Identifier as read from the row, if any
        rule: Rule that produced the diagnostic (e.g. "required_field")
        message: Human readable explanation
        severity: "error" rows count against the run; "warning" rows are
            expected noise such as comment or section-divider rows
    """

    row_number: int | None = None
    product_id: str | None = None
    rule: str
    message: str
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        where = f"Row {self.row_number}" if self.row_number is not None else "Store"
        ident = f" [{self.product_id}]" if self.product_id else ""
        return f"{where}{ident}: {self.message} ({self.rule})"


class SyncRun(BaseModel):
    """
    Audit record of one pipeline execution.

    Created at INIT with status RUNNING and finalized exactly once at
    COMPLETED or FAILED. A finalized run is never modified.
    """

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    source_file: str
    mode: Literal["relational", "document"] = "document"
    status: SyncStatus = SyncStatus.RUNNING
    stage: SyncStage = SyncStage.INIT

    rows_read: int = 0
    rows_valid: int = 0
    rows_skipped: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0

    diagnostics: list[RowDiagnostic] = Field(default_factory=list)
    error_message: str | None = None
    snapshot_path: str | None = None
    dry_run: bool = False

    started_at: datetime = Field(default_factory=utc_now)
    finished_at: datetime | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "run_id": "5f0c2b8e9d3a4c4fb0c8a9d1e2f3a4b5",
                "source_file": "Stock-Management-Inventory-Updated.xlsx",
                "mode": "relational",
                "status": "COMPLETED",
                "stage": "COMPLETED",
                "rows_read": 10,
                "rows_valid": 9,
                "rows_skipped": 1,
                "inserted": 9,
                "updated": 0,
                "failed": 0,
            }
        }

    @property
    def is_finalized(self) -> bool:
        return self.status != SyncStatus.RUNNING

    @property
    def error_count(self) -> int:
        """Diagnostics with severity "error" (validation, duplicates, write failures)."""
        return sum(1 for d in self.diagnostics if d.severity == "error")

    def advance(self, stage: SyncStage) -> None:
        if self.is_finalized:
            raise RuntimeError(f"SyncRun {self.run_id} is already finalized")
        self.stage = stage

    def complete(self) -> None:
        self.advance(SyncStage.COMPLETED)
        self.status = SyncStatus.COMPLETED
        self.finished_at = utc_now()

    def fail(self, message: str) -> None:
        """Finalize as FAILED; ``stage`` keeps the stage that was running."""
        if self.is_finalized:
            raise RuntimeError(f"SyncRun {self.run_id} is already finalized")
        self.status = SyncStatus.FAILED
        self.error_message = message
        self.finished_at = utc_now()

    def summary(self) -> str:
        if self.status == SyncStatus.FAILED:
            return f"failed to run during {self.stage.value}: {self.error_message}"
        return (
            f"completed with {self.error_count} errors "
            f"({self.inserted} inserted, {self.updated} updated, "
            f"{self.failed} failed, {self.rows_skipped} rows skipped)"
        )
