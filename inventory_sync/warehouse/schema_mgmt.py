"""
Schema management for the relational store.

Applies the bundled DDL (sql/schema.sql). Every statement is idempotent, so
ensure_schema() runs at the start of each relational sync.
"""

from importlib import resources

from inventory_sync.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

REQUIRED_TABLES = ("products", "sync_runs")


def load_schema_sql() -> str:
    return resources.files("inventory_sync.warehouse").joinpath("sql/schema.sql").read_text(encoding="utf-8")


class SchemaManager:
    """
    Creates and inspects the products / sync_runs tables.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    def ensure_schema(self) -> None:
        """Create missing tables and indexes."""
        ddl = load_schema_sql()
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(ddl)
            conn.commit()
        logger.debug("Relational schema ensured")

    def missing_tables(self) -> list[str]:
        rows = self.pool.execute_query(
            """
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = current_schema() AND table_name = ANY(%s)
            """,
            (list(REQUIRED_TABLES),),
        )
        present = {row["table_name"] for row in rows}
        return [table for table in REQUIRED_TABLES if table not in present]
