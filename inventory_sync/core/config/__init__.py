"""
Pipeline configuration.
"""

from .config_loader import DEFAULT_CONFIG_PATH, SERVERLESS_MARKERS, PipelineConfigLoader
from .pipeline_config import (
    BackupConfig,
    CatalogConfig,
    ClassifierConfig,
    DatabaseConfig,
    PathsConfig,
    PipelineConfig,
    ReportConfig,
    RowRulesConfig,
)

__all__ = [
    "PipelineConfig",
    "PipelineConfigLoader",
    "PathsConfig",
    "DatabaseConfig",
    "RowRulesConfig",
    "ClassifierConfig",
    "CatalogConfig",
    "BackupConfig",
    "ReportConfig",
    "DEFAULT_CONFIG_PATH",
    "SERVERLESS_MARKERS",
]
