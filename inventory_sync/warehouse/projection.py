"""
Projection writer for the storefront document (inventory.json).

The projection is regenerated wholesale from the authoritative set after
every successful write pass; it is never patched in place.
"""

import json
from pathlib import Path

from inventory_sync.core.errors import OutputTargetError
from inventory_sync.core.models import CanonicalProduct
from inventory_sync.observability.logger import get_logger

from .upsert import atomic_write_json

logger = get_logger(__name__)


class ProjectionWriter:
    """
    Writes and reads the view-name -> product-list document.

    Args:
        path: Location of the projection document
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def write(self, document: dict[str, list[dict]]) -> Path:
        """
        Replace the projection document.

        Raises:
            OutputTargetError: The document cannot be written
        """
        try:
            atomic_write_json(self.path, document)
        except OSError as e:
            raise OutputTargetError(f"Cannot write projection {self.path}: {e}") from e

        logger.info(
            f"Projection written: {self.path}",
            extra={"projection": str(self.path), "products": len(document.get("all", []))},
        )
        return self.path

    def read(self) -> dict[str, list[CanonicalProduct]]:
        """Load the projection back into canonical products ({} when absent)."""
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            raw = json.load(f)
        return {
            name: [CanonicalProduct.model_validate(item) for item in items]
            for name, items in raw.items()
        }

    def check_writable(self) -> None:
        """
        Fail early when the projection directory cannot be created.

        Raises:
            OutputTargetError: The parent directory is unusable
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputTargetError(f"Output directory {self.path.parent} is not writable: {e}") from e
