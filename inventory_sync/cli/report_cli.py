"""
Command-line interface for the order-book reports.

Usage:
    inventory-report generate [--as-of YYYY-MM-DD]
    inventory-report schedule
"""

import argparse
import sys
from datetime import date

from inventory_sync.core.errors import PipelineError
from inventory_sync.observability.logger import get_logger
from inventory_sync.observability.metrics import export_metrics
from inventory_sync.reporting import ReportScheduler, ReportService

from .common import add_common_arguments, load_config

logger = get_logger(__name__)


def generate_command(args: argparse.Namespace) -> int:
    """Generate one order book. No orders is a success without an artifact."""
    config = load_config(args)
    service = ReportService(config.report)

    path = service.generate(args.as_of)

    logger.info("=" * 60)
    if path is None:
        logger.info("ORDER BOOK SKIPPED: no orders")
    else:
        logger.info("ORDER BOOK GENERATED")
        logger.info(f"Artifact: {path}")
        logger.info(f"Master: {service.master_path}")
    logger.info("=" * 60)

    if args.metrics_file:
        export_metrics(args.metrics_file)
    return 0


def schedule_command(args: argparse.Namespace) -> int:
    """Run the daily scheduler until SIGINT/SIGTERM."""
    config = load_config(args)
    report = config.report
    scheduler = ReportScheduler(
        ReportService(report),
        run_at=report.run_at,
        timezone=report.timezone,
        retention_days=report.retention_days,
    )
    if args.run_now:
        try:
            scheduler.trigger()
        except PipelineError as e:
            logger.error(f"Initial order book failed: {e}")
    scheduler.run_forever()
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="inventory-report",
        description="Daily order-book workbook generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate today's order book
  inventory-report generate

  # Generate for a given day
  inventory-report generate --as-of 2025-03-01

  # Run the daily scheduler (generates once at startup)
  inventory-report schedule --run-now
        """
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate the order book now")
    generate_parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Report date, YYYY-MM-DD (default: today in the report timezone)"
    )
    generate_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this textfile after the run"
    )
    generate_parser.set_defaults(func=generate_command)

    schedule_parser = subparsers.add_parser("schedule", help="Run the daily scheduler")
    schedule_parser.add_argument(
        "--run-now",
        action="store_true",
        help="Generate an order book immediately before waiting for the schedule"
    )
    schedule_parser.set_defaults(func=schedule_command)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(args.func(args))
    except (PipelineError, OSError) as e:
        logger.error(f"inventory-report failed to run: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
