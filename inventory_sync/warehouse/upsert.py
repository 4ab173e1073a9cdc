"""
Authoritative product stores with idempotent, field-wise merging upserts.

Two backends share one contract:

- PostgresProductStore: one row per product in ``products``; each upsert
  is its own transaction (SELECT ... FOR UPDATE, merge,
  INSERT ... ON CONFLICT DO UPDATE).
- DocumentProductStore: a JSON file keyed by product id, used when no
  database is reachable. Merges happen in memory; the file is committed
  with an atomic replace.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

import psycopg
from psycopg.types.json import Jsonb
from pydantic import BaseModel, Field

from inventory_sync.core.builder import BuiltRecord
from inventory_sync.core.errors import StoreUnavailableError, StoreWriteError
from inventory_sync.core.models import CanonicalProduct
from inventory_sync.core.models.sync_run import utc_now
from inventory_sync.observability.logger import get_logger

from .connection import DatabaseConnectionPool
from .schema_mgmt import SchemaManager

logger = get_logger(__name__)


class UpsertOutcome(str, Enum):
    INSERTED = "INSERTED"
    UPDATED = "UPDATED"


class BatchWriteResult(BaseModel):
    """
    Outcome of one write pass.

    Attributes:
        inserted: Product ids inserted
        updated: Product ids updated
        failures: Product id -> error message for records that were not written
    """

    inserted: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def written(self) -> int:
        return len(self.inserted) + len(self.updated)


def merge_product(existing: CanonicalProduct, built: BuiltRecord, now: datetime) -> CanonicalProduct:
    """
    Overlay the supplied fields of a freshly built record on a stored one.

    ``date_added`` always survives from the stored record; ``last_updated``
    is stamped with ``now``.
    """
    data = existing.model_dump()
    for field in built.supplied_fields:
        data[field] = getattr(built.product, field)
    data["product_id"] = existing.product_id
    data["date_added"] = existing.date_added or built.product.date_added or now
    data["last_updated"] = now
    return CanonicalProduct(**data)


class ProductStore(ABC):
    """
    Authoritative product store.

    Use as a context manager; the underlying handle is released on every
    exit path.
    """

    mode: str = ""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def open(self) -> None:
        """Acquire the store handle. Raises StoreUnavailableError."""

    def close(self) -> None:
        """Release the store handle."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @abstractmethod
    def get(self, product_id: str) -> CanonicalProduct | None:
        pass

    @abstractmethod
    def upsert(self, built: BuiltRecord) -> UpsertOutcome:
        """
        Insert or merge one record.

        Raises:
            StoreWriteError: The record could not be written
        """
        pass

    @abstractmethod
    def all_products(self) -> list[CanonicalProduct]:
        """Every stored product, ordered by product id."""
        pass

    @abstractmethod
    def replace_all(self, products: Iterable[CanonicalProduct]) -> int:
        """Replace the whole catalog (backup restore). Returns the new count."""
        pass

    def upsert_batch(self, records: Iterable[BuiltRecord]) -> BatchWriteResult:
        """
        Upsert records one by one.

        A failing record is collected in ``failures``; records already
        written stay written.
        """
        result = BatchWriteResult()
        for built in records:
            try:
                outcome = self.upsert(built)
            except StoreWriteError as e:
                logger.error(
                    f"Failed to write product {e.product_id}: {e.message}",
                    extra={"product_id": e.product_id},
                )
                result.failures[e.product_id] = e.message
                continue
            if outcome == UpsertOutcome.INSERTED:
                result.inserted.append(built.product_id)
            else:
                result.updated.append(built.product_id)

        logger.info(
            f"Write pass: {len(result.inserted)} inserted, {len(result.updated)} updated, "
            f"{len(result.failures)} failed",
            extra={"mode": self.mode, "inserted": len(result.inserted),
                   "updated": len(result.updated), "failed": len(result.failures)},
        )
        return result


class PostgresProductStore(ProductStore):
    """
    Product store backed by the ``products`` table.

    Args:
        pool: Connection pool; opened on enter if not already open, and
            closed on exit only when this store opened it
        ensure_schema: Create missing tables when opening
    """

    mode = "relational"

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        ensure_schema: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(clock)
        self.pool = pool
        self.ensure_schema = ensure_schema
        self._owns_pool = False

    def open(self) -> None:
        if not self.pool.is_open:
            try:
                self.pool.open()
            except psycopg.OperationalError as e:
                raise StoreUnavailableError(f"Database unavailable: {e}") from e
            self._owns_pool = True
        if self.ensure_schema:
            try:
                SchemaManager(self.pool).ensure_schema()
            except psycopg.Error as e:
                raise StoreUnavailableError(f"Cannot prepare schema: {e}") from e

    def close(self) -> None:
        if self._owns_pool:
            self.pool.close()
            self._owns_pool = False

    def get(self, product_id: str) -> CanonicalProduct | None:
        rows = self.pool.execute_query(
            "SELECT data FROM products WHERE product_id = %s", (product_id,)
        )
        return CanonicalProduct.model_validate(rows[0]["data"]) if rows else None

    def upsert(self, built: BuiltRecord) -> UpsertOutcome:
        product_id = built.product_id
        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.execute(
                            "SELECT data FROM products WHERE product_id = %s FOR UPDATE",
                            (product_id,),
                        )
                        row = cur.fetchone()
                        now = self.clock()
                        if row is None:
                            product = built.product.model_copy(
                                update={
                                    "date_added": built.product.date_added or now,
                                    "last_updated": now,
                                }
                            )
                            outcome = UpsertOutcome.INSERTED
                        else:
                            existing = CanonicalProduct.model_validate(row["data"])
                            product = merge_product(existing, built, now)
                            outcome = UpsertOutcome.UPDATED
                        cur.execute(self._upsert_sql(), self._params(product))
        except (psycopg.Error, ValueError) as e:
            raise StoreWriteError(product_id, str(e)) from e
        return outcome

    def all_products(self) -> list[CanonicalProduct]:
        rows = self.pool.execute_query("SELECT data FROM products ORDER BY product_id")
        return [CanonicalProduct.model_validate(row["data"]) for row in rows]

    def replace_all(self, products: Iterable[CanonicalProduct]) -> int:
        products = list(products)
        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM products")
                    cur.executemany(self._upsert_sql(), [self._params(p) for p in products])
        logger.info(f"Replaced catalog with {len(products)} products", extra={"mode": self.mode})
        return len(products)

    @staticmethod
    def _upsert_sql() -> str:
        return """
            INSERT INTO products (
                product_id, name, category, section, price, in_stock,
                data, checksum, date_added, last_updated
            )
            VALUES (
                %(product_id)s, %(name)s, %(category)s, %(section)s, %(price)s, %(in_stock)s,
                %(data)s, %(checksum)s, %(date_added)s, %(last_updated)s
            )
            ON CONFLICT (product_id) DO UPDATE SET
                name = EXCLUDED.name,
                category = EXCLUDED.category,
                section = EXCLUDED.section,
                price = EXCLUDED.price,
                in_stock = EXCLUDED.in_stock,
                data = EXCLUDED.data,
                checksum = EXCLUDED.checksum,
                last_updated = EXCLUDED.last_updated
        """

    def _params(self, product: CanonicalProduct) -> dict:
        now = self.clock()
        return {
            "product_id": product.product_id,
            "name": product.name,
            "category": product.category,
            "section": product.section,
            "price": product.price,
            "in_stock": product.in_stock,
            "data": Jsonb(product.to_document()),
            "checksum": product.checksum(),
            "date_added": product.date_added or now,
            "last_updated": product.last_updated or now,
        }


class DocumentProductStore(ProductStore):
    """
    Product store backed by a single JSON document.

    The document maps product id -> camelCase product. It is loaded on
    open, merged in memory, and written back with temp file + os.replace
    after each write pass (and on close when records are pending).
    """

    mode = "document"

    def __init__(self, path: str | Path, clock: Callable[[], datetime] = utc_now):
        super().__init__(clock)
        self.path = Path(path)
        self._products: dict[str, CanonicalProduct] | None = None
        self._dirty = False

    def open(self) -> None:
        if self._products is not None:
            return
        if not self.path.exists():
            self._products = {}
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            self._products = {
                product_id: CanonicalProduct.model_validate(doc) for product_id, doc in raw.items()
            }
        except (OSError, ValueError, AttributeError) as e:
            raise StoreUnavailableError(f"Cannot load product document {self.path}: {e}") from e
        logger.debug(f"Loaded {len(self._products)} products from {self.path}")

    def close(self) -> None:
        if self._dirty:
            self.flush()
        self._products = None

    @property
    def products(self) -> dict[str, CanonicalProduct]:
        if self._products is None:
            raise RuntimeError("Document store is not open. Use it as a context manager.")
        return self._products

    def get(self, product_id: str) -> CanonicalProduct | None:
        return self.products.get(product_id)

    def upsert(self, built: BuiltRecord) -> UpsertOutcome:
        now = self.clock()
        existing = self.products.get(built.product_id)
        try:
            if existing is None:
                product = built.product.model_copy(
                    update={"date_added": built.product.date_added or now, "last_updated": now}
                )
                outcome = UpsertOutcome.INSERTED
            else:
                product = merge_product(existing, built, now)
                outcome = UpsertOutcome.UPDATED
        except ValueError as e:
            raise StoreWriteError(built.product_id, str(e)) from e
        self.products[built.product_id] = product
        self._dirty = True
        return outcome

    def upsert_batch(self, records: Iterable[BuiltRecord]) -> BatchWriteResult:
        result = super().upsert_batch(records)
        self.flush()
        return result

    def all_products(self) -> list[CanonicalProduct]:
        return [self.products[key] for key in sorted(self.products)]

    def replace_all(self, products: Iterable[CanonicalProduct]) -> int:
        self._products = {product.product_id: product for product in products}
        self.flush()
        logger.info(f"Replaced catalog with {len(self._products)} products", extra={"mode": self.mode})
        return len(self._products)

    def flush(self) -> None:
        """
        Commit the in-memory catalog to disk.

        Raises:
            StoreUnavailableError: The document cannot be written
        """
        document = {key: self.products[key].to_document() for key in sorted(self.products)}
        try:
            atomic_write_json(self.path, document)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write product document {self.path}: {e}") from e
        self._dirty = False


def atomic_write_json(path: Path, document) -> None:
    """Write JSON next to ``path`` and move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
