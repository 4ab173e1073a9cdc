"""
Order reporting: order log reading, aggregation, workbook generation and scheduling.
"""

from .aggregator import CustomerSummary, DailyTotals, GroupTotals, OrderAggregates, OrderAggregator
from .orders import OrderLogReader
from .report_builder import ReportBuilder, ReportService, save_workbook
from .scheduler import ReportScheduler

__all__ = [
    "OrderLogReader",
    "OrderAggregator",
    "OrderAggregates",
    "DailyTotals",
    "GroupTotals",
    "CustomerSummary",
    "ReportBuilder",
    "ReportService",
    "ReportScheduler",
    "save_workbook",
]
