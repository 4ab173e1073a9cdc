"""
Shared CLI plumbing: .env loading, configuration and logging setup.
"""

import argparse

from dotenv import load_dotenv

from inventory_sync.core.config import PipelineConfig, PipelineConfigLoader
from inventory_sync.observability.logger import configure_logging
from inventory_sync.warehouse import DatabaseConnectionPool


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to pipeline YAML (default: config/pipeline.yaml)"
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Environment file loaded before the configuration (default: .env)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level"
    )


def load_config(args: argparse.Namespace) -> PipelineConfig:
    """
    Load .env, the YAML config and environment overrides, then configure logging.

    Raises:
        ConfigError: The configuration is invalid
    """
    load_dotenv(args.env_file, override=False)
    config = PipelineConfigLoader(args.config).load()
    configure_logging(level=args.log_level or config.log_level, format_type=config.log_format)
    return config


def make_pool(config: PipelineConfig) -> DatabaseConnectionPool:
    """
    Connection pool for relational mode (not opened).

    Raises:
        ValueError: No database password configured
    """
    return DatabaseConnectionPool.from_config(config.database)
