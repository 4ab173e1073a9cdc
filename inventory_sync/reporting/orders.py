"""
Order log reader.

The order log is owned by the storefront checkout flow; this side only reads
it. A missing log means "no orders yet"; an unreadable one is an error.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from inventory_sync.core.errors import ReportError
from inventory_sync.core.models import OrderRecord
from inventory_sync.observability.logger import get_logger

logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class OrderLogReader:
    """
    Reads orders.json into OrderRecords, newest first.

    Args:
        path: Order log (a JSON array, or an object with an "orders" array)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> list[OrderRecord]:
        """
        Load every well-formed order.

        Malformed entries are skipped with a warning.

        Raises:
            ReportError: The file exists but is not a readable order list
        """
        if not self.path.exists():
            logger.info(f"No order log at {self.path}")
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise ReportError(f"Cannot read order log {self.path}: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("orders")
        if not isinstance(raw, list):
            raise ReportError(f"Order log {self.path} must contain a list of orders")

        orders: list[OrderRecord] = []
        for index, entry in enumerate(raw):
            try:
                orders.append(OrderRecord.model_validate(entry))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed order at index {index}: {e.error_count()} errors",
                    extra={"index": index},
                )

        orders.sort(key=lambda order: order.placed_at or _OLDEST, reverse=True)
        logger.info(f"Loaded {len(orders)} orders from {self.path.name}")
        return orders
