"""
Exception hierarchy for the sync and report pipelines.

Row-level problems never surface as these exceptions; they are collected as
RowDiagnostic entries. Everything here either aborts a run (SyncError
subclasses) or is caught at a per-record boundary (StoreWriteError,
RecordBuildError).
"""


class PipelineError(Exception):
    """Base class for all inventory-sync errors."""


class ConfigError(PipelineError):
    """Raised when the pipeline configuration file is invalid."""


class SyncError(PipelineError):
    """Unrecoverable sync failure; the run is marked FAILED."""

    stage: str | None = None


class SourceReadError(SyncError):
    """The source spreadsheet is missing or cannot be parsed."""


class NoValidRowsError(SyncError):
    """No row of the source produced a valid product record."""


class OutputTargetError(SyncError):
    """An output location (data dir, projection document) cannot be written."""


class StoreUnavailableError(SyncError):
    """The authoritative store could not be opened."""


class StoreWriteError(PipelineError):
    """A single record could not be written to the authoritative store."""

    def __init__(self, product_id: str, message: str):
        self.product_id = product_id
        self.message = message
        super().__init__(f"{product_id}: {message}")


class RecordBuildError(PipelineError):
    """A source row could not be turned into a canonical product."""


class ReportError(PipelineError):
    """The order report could not be generated."""
