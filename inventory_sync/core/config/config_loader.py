"""
Pipeline configuration loading.

Reads config/pipeline.yaml and applies environment overrides.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from inventory_sync.core.errors import ConfigError
from inventory_sync.observability.logger import get_logger

from .pipeline_config import PipelineConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config/pipeline.yaml")

# Any of these in the environment means the process runs somewhere without a
# reachable database.
SERVERLESS_MARKERS = ("VERCEL", "NETLIFY", "AWS_LAMBDA_FUNCTION_NAME")


class PipelineConfigLoader:
    """
    Loads pipeline settings from a YAML file.

    Expected YAML format (every section optional):
    ```yaml
    mode: relational
    paths:
      source_file: Stock-Management-Inventory-Updated.xlsx
      data_dir: data
    header_synonyms:
      "Item Code": product_id
    pricing:
      category_prices:
        rings: 1500
      fallback_price: 1500
      sale_markup: 1.25
    views:
      - name: onSale
        flag: is_sale
    backup:
      retention_count: 10
    ```

    Environment overrides: SYNC_SOURCE_FILE, SYNC_DATA_DIR, SYNC_MODE,
    DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD, LOG_LEVEL, LOG_FORMAT,
    REPORT_TIMEZONE.
    """

    def __init__(self, config_path: str | Path | None = None, environ: dict[str, str] | None = None):
        """
        Initialize the config loader.

        Args:
            config_path: YAML file (defaults to config/pipeline.yaml)
            environ: Environment mapping (defaults to os.environ)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.environ = environ if environ is not None else os.environ

    def load(self) -> PipelineConfig:
        """
        Load, validate and override the configuration.

        Raises:
            ConfigError: If the YAML is malformed or fails validation
        """
        raw = self._read_yaml()
        self._apply_env(raw)
        try:
            config = PipelineConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e

        if config.mode == "relational" and self.serverless_marker():
            logger.info(
                f"Serverless environment detected ({self.serverless_marker()}), using document-only mode"
            )
            config.mode = "document"
        return config

    def serverless_marker(self) -> str | None:
        for marker in SERVERLESS_MARKERS:
            if self.environ.get(marker):
                return marker
        return None

    def _read_yaml(self) -> dict[str, Any]:
        if not self.config_path.exists():
            logger.info(f"No configuration file at {self.config_path}, using defaults")
            return {}
        try:
            with open(self.config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"{self.config_path} must contain a mapping at the top level")
        return config

    def _apply_env(self, raw: dict[str, Any]) -> None:
        env = self.environ

        def section(name: str) -> dict[str, Any]:
            value = raw.get(name)
            if value is None:
                value = raw[name] = {}
            if not isinstance(value, dict):
                raise ConfigError(f"Section '{name}' must be a mapping")
            return value

        if env.get("SYNC_SOURCE_FILE"):
            section("paths")["source_file"] = env["SYNC_SOURCE_FILE"]
        if env.get("SYNC_DATA_DIR"):
            section("paths")["data_dir"] = env["SYNC_DATA_DIR"]
        if env.get("SYNC_MODE"):
            raw["mode"] = env["SYNC_MODE"].lower()

        for key, var in (("host", "DB_HOST"), ("port", "DB_PORT"), ("name", "DB_NAME"),
                         ("user", "DB_USER"), ("password", "DB_PASSWORD")):
            if env.get(var):
                section("database")[key] = env[var]

        if env.get("LOG_LEVEL"):
            raw["log_level"] = env["LOG_LEVEL"].upper()
        if env.get("LOG_FORMAT"):
            raw["log_format"] = env["LOG_FORMAT"].lower()
        if env.get("REPORT_TIMEZONE"):
            section("report")["timezone"] = env["REPORT_TIMEZONE"]
