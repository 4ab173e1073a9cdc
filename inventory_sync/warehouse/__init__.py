"""
Authoritative stores, projection document and run log.
"""

from .audit import JsonlRunLog, PostgresRunLog, RunLog
from .connection import DatabaseConnectionPool
from .projection import ProjectionWriter
from .schema_mgmt import SchemaManager
from .upsert import (
    BatchWriteResult,
    DocumentProductStore,
    PostgresProductStore,
    ProductStore,
    UpsertOutcome,
    merge_product,
)

__all__ = [
    "DatabaseConnectionPool",
    "SchemaManager",
    "ProductStore",
    "PostgresProductStore",
    "DocumentProductStore",
    "UpsertOutcome",
    "BatchWriteResult",
    "merge_product",
    "ProjectionWriter",
    "RunLog",
    "PostgresRunLog",
    "JsonlRunLog",
]
