"""
Sync run log.

Every SyncRun is recorded twice: once when it starts (RUNNING) and once when
it is finalized. Relational mode keeps the log in ``sync_runs``; document
mode appends JSON lines to sync-runs.jsonl, where the latest line for a
run_id wins.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import psycopg
from psycopg.types.json import Jsonb

from inventory_sync.core.models import SyncRun
from inventory_sync.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)


class RunLog(ABC):
    """Persistence of SyncRun records."""

    @abstractmethod
    def start(self, run: SyncRun) -> None:
        pass

    @abstractmethod
    def finish(self, run: SyncRun) -> None:
        pass

    @abstractmethod
    def recent(self, limit: int = 20) -> list[SyncRun]:
        """Most recent runs first."""
        pass


class PostgresRunLog(RunLog):
    """
    Run log in the ``sync_runs`` table.

    Args:
        pool: Open database connection pool
    """

    def __init__(self, pool: DatabaseConnectionPool):
        self.pool = pool

    def start(self, run: SyncRun) -> None:
        insert_sql = """
            INSERT INTO sync_runs (
                run_id, source_file, mode, status, stage, dry_run, diagnostics, started_at
            ) VALUES (
                %(run_id)s, %(source_file)s, %(mode)s, %(status)s, %(stage)s,
                %(dry_run)s, %(diagnostics)s, %(started_at)s
            )
        """
        self._execute(insert_sql, run)

    def finish(self, run: SyncRun) -> None:
        update_sql = """
            UPDATE sync_runs SET
                status = %(status)s,
                stage = %(stage)s,
                rows_read = %(rows_read)s,
                rows_valid = %(rows_valid)s,
                rows_skipped = %(rows_skipped)s,
                inserted = %(inserted)s,
                updated = %(updated)s,
                failed = %(failed)s,
                diagnostics = %(diagnostics)s,
                error_message = %(error_message)s,
                snapshot_path = %(snapshot_path)s,
                finished_at = %(finished_at)s
            WHERE run_id = %(run_id)s
        """
        self._execute(update_sql, run)

    def recent(self, limit: int = 20) -> list[SyncRun]:
        rows = self.pool.execute_query(
            "SELECT * FROM sync_runs ORDER BY started_at DESC LIMIT %s", (limit,)
        )
        return [SyncRun.model_validate(row) for row in rows]

    def _execute(self, sql: str, run: SyncRun) -> None:
        params = run.model_dump(mode="json")
        params["status"] = run.status.value
        params["stage"] = run.stage.value
        params["started_at"] = run.started_at
        params["finished_at"] = run.finished_at
        params["diagnostics"] = Jsonb(params["diagnostics"])
        try:
            self.pool.execute_command(sql, params)
        except psycopg.Error as e:
            logger.error(
                f"Failed to record sync run {run.run_id}: {e}",
                extra={"run_id": run.run_id},
            )
            raise


class JsonlRunLog(RunLog):
    """
    Append-only run log file.

    Args:
        path: JSON lines file (created on first write)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def start(self, run: SyncRun) -> None:
        self._append(run)

    def finish(self, run: SyncRun) -> None:
        self._append(run)

    def recent(self, limit: int = 20) -> list[SyncRun]:
        if not self.path.exists():
            return []
        latest: dict[str, SyncRun] = {}
        with open(self.path, encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    run = SyncRun.model_validate_json(line)
                except ValueError:
                    logger.warning(f"Skipping malformed run log line {line_number} in {self.path}")
                    continue
                latest[run.run_id] = run
        runs = sorted(latest.values(), key=lambda r: r.started_at, reverse=True)
        return runs[:limit]

    def _append(self, run: SyncRun) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(run.model_dump_json() + "\n")
