"""
Pipeline configuration models.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from inventory_sync.core.classification import DEFAULT_COLOR_KEYWORDS, DEFAULT_SIZE_KEYWORDS
from inventory_sync.core.coercion import PricingPolicy
from inventory_sync.core.validators.sentinel_row_validator import (
    DEFAULT_COMMENT_PREFIX,
    DEFAULT_HEADER_LITERALS,
    DEFAULT_SENTINELS,
)
from inventory_sync.views import DEFAULT_VIEWS, ViewDefinition


class PathsConfig(BaseModel):
    """
    File locations. Relative ``projection_file``, ``backup_dir`` and
    ``run_log_file`` resolve against ``data_dir``.
    """

    source_file: Path = Path("Stock-Management-Inventory-Updated.xlsx")
    data_dir: Path = Path("data")
    projection_file: Path = Path("inventory.json")
    store_file: Path = Path("products.json")
    backup_dir: Path = Path("backups")
    run_log_file: Path = Path("sync-runs.jsonl")

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.data_dir / path

    @property
    def projection_path(self) -> Path:
        return self.resolve(self.projection_file)

    @property
    def store_path(self) -> Path:
        return self.resolve(self.store_file)

    @property
    def backup_path(self) -> Path:
        return self.resolve(self.backup_dir)

    @property
    def run_log_path(self) -> Path:
        return self.resolve(self.run_log_file)


class DatabaseConfig(BaseModel):
    host: str = "localhost"
    port: int = 5432
    name: str = "inventory"
    user: str = "inventory"
    password: str | None = None
    min_size: int = Field(default=1, ge=1)
    max_size: int = Field(default=4, ge=1)
    timeout: float = Field(default=30.0, gt=0)


class RowRulesConfig(BaseModel):
    comment_prefix: str = DEFAULT_COMMENT_PREFIX
    sentinels: list[str] = Field(default_factory=lambda: list(DEFAULT_SENTINELS))
    header_literals: list[str] = Field(default_factory=lambda: list(DEFAULT_HEADER_LITERALS))


class ClassifierConfig(BaseModel):
    color_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_COLOR_KEYWORDS))
    size_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_SIZE_KEYWORDS))
    delimiter: str = Field(default="|", min_length=1)


class CatalogConfig(BaseModel):
    default_brand: str = "Nurvi Jewel"
    image_prefix: str = "/images/products/"


class BackupConfig(BaseModel):
    retention_count: int = Field(default=10, ge=1)
    retention_days: int = Field(default=30, ge=1)


class ReportConfig(BaseModel):
    order_log: Path = Path("data/orders.json")
    output_dir: Path = Path("data/reports")
    file_prefix: str = "Nurvi-Jewel-Order-Book-"
    master_file: str = "Book1.xlsx"
    timezone: str = "Asia/Kolkata"
    run_at: str = Field(default="00:00", pattern=r"^\d{1,2}:\d{2}$")
    retention_days: int = Field(default=90, ge=1)
    currency_format: str = "₹#,##0.00"
    currency_symbol: str = "₹"


class PipelineConfig(BaseModel):
    """
    Complete pipeline configuration.

    ``mode`` selects the authoritative store: "relational" (PostgreSQL) or
    "document" (JSON file, used where no database is reachable).
    """

    mode: Literal["relational", "document"] = "relational"
    paths: PathsConfig = Field(default_factory=PathsConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    header_synonyms: dict[str, str] = Field(default_factory=dict)
    row_rules: RowRulesConfig = Field(default_factory=RowRulesConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    pricing: PricingPolicy = Field(default_factory=PricingPolicy)
    views: list[ViewDefinition] = Field(default_factory=lambda: list(DEFAULT_VIEWS))
    backup: BackupConfig = Field(default_factory=BackupConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
