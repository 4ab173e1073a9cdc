"""
Daily order-book scheduler.

Fires once a day at a local wall-clock time, generates the order book and
prunes dated artifacts past the retention window. The master artifact is
never pruned.
"""

import re
import signal
import threading
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo

from inventory_sync.core.errors import ReportError
from inventory_sync.observability import metrics
from inventory_sync.observability.logger import get_logger

from .report_builder import ReportService

logger = get_logger(__name__)

_ARTIFACT_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})\.xlsx$")


def parse_run_at(run_at: str) -> time:
    hour, minute = (int(part) for part in run_at.split(":"))
    return time(hour=hour, minute=minute)


class ReportScheduler:
    """
    Runs ReportService.generate() every day at ``run_at`` local time.

    Args:
        service: Report service to trigger
        run_at: "HH:MM" wall-clock time in ``timezone``
        timezone: IANA zone of the schedule
        retention_days: Dated artifacts older than this are deleted
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        service: ReportService,
        run_at: str = "00:00",
        timezone: str = "Asia/Kolkata",
        retention_days: int = 90,
        clock: Callable[[], datetime] | None = None,
    ):
        self.service = service
        self.run_at = parse_run_at(run_at)
        self.tz = ZoneInfo(timezone)
        self.retention_days = retention_days
        self.clock = clock or (lambda: datetime.now(self.tz))
        self._stop = threading.Event()

    def next_run_after(self, now: datetime) -> datetime:
        """First fire time strictly after ``now`` (aware, in the schedule zone)."""
        local = now.astimezone(self.tz)
        candidate = datetime.combine(local.date(), self.run_at, tzinfo=self.tz)
        if candidate <= local:
            candidate = datetime.combine(local.date() + timedelta(days=1), self.run_at, tzinfo=self.tz)
        return candidate

    def trigger(self, now: datetime | None = None) -> Path | None:
        """
        Generate today's order book, then prune old artifacts.

        Raises:
            ReportError: Generation failed (pruning still ran)
        """
        now = now or self.clock()
        as_of = now.astimezone(self.tz).date()
        try:
            return self.service.generate(as_of)
        finally:
            self.prune_artifacts(as_of)

    def artifact_date(self, path: Path) -> date:
        """Date encoded in the file name, falling back to the file's mtime."""
        match = _ARTIFACT_DATE.search(path.name)
        if match:
            try:
                return date.fromisoformat(match.group(1))
            except ValueError:
                logger.debug(f"Unparseable date in {path.name}, using mtime")
        return datetime.fromtimestamp(path.stat().st_mtime, self.tz).date()

    def prune_artifacts(self, as_of: date) -> list[Path]:
        output_dir = self.service.output_dir
        if not output_dir.is_dir():
            return []

        cutoff = as_of - timedelta(days=self.retention_days)
        master = self.service.master_path.resolve()
        deleted: list[Path] = []

        for path in sorted(output_dir.glob(f"{self.service.config.file_prefix}*.xlsx")):
            if path.resolve() == master:
                continue
            try:
                if self.artifact_date(path) < cutoff:
                    path.unlink()
                    deleted.append(path)
            except OSError as e:
                logger.warning(f"Could not prune {path.name}: {e}")

        if deleted:
            metrics.increment_counter(metrics.report_artifacts_pruned_total, len(deleted))
            logger.info(f"Pruned {len(deleted)} old order books", extra={"deleted": [p.name for p in deleted]})
        return deleted

    def stop(self, signum=None, frame=None) -> None:  # type: ignore[no-untyped-def]
        if signum is not None:
            logger.info(f"Received {signal.Signals(signum).name} signal, stopping scheduler...")
        self._stop.set()

    def run_forever(self, install_signal_handlers: bool = True) -> None:
        """Sleep until each fire time and trigger; returns after SIGINT/SIGTERM."""
        if install_signal_handlers:
            signal.signal(signal.SIGINT, self.stop)
            signal.signal(signal.SIGTERM, self.stop)

        logger.info(
            f"Order book scheduler started: daily at {self.run_at.strftime('%H:%M')} ({self.tz.key})"
        )
        while not self._stop.is_set():
            now = self.clock()
            fire_at = self.next_run_after(now)
            logger.info(f"Next order book at {fire_at.isoformat()}")
            if self._stop.wait(timeout=(fire_at - now).total_seconds()):
                break
            try:
                self.trigger(fire_at)
            except ReportError as e:
                logger.error(f"Scheduled order book failed: {e}")

        logger.info("Order book scheduler stopped")
