"""
Core data models for the inventory sync and order reporting pipelines.

All models use Pydantic for runtime validation and type safety.
"""

from .order import OrderItem, OrderRecord, ShippingAddress
from .product import CanonicalProduct
from .source_row import SourceRow
from .sync_run import RowDiagnostic, SyncRun, SyncStage, SyncStatus

__all__ = [
    "CanonicalProduct",
    "SourceRow",
    "SyncRun",
    "SyncStage",
    "SyncStatus",
    "RowDiagnostic",
    "OrderRecord",
    "OrderItem",
    "ShippingAddress",
]
