"""
Daily order book: a four-sheet Excel workbook built with openpyxl.

Sheets: Orders Summary, Detailed Orders, Analytics, Customers. Styling
(fills, fonts, borders) is presentation only; cell values are exactly the
order and aggregate values.
"""

import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from inventory_sync.core.config import ReportConfig
from inventory_sync.core.errors import ReportError
from inventory_sync.core.models import OrderRecord
from inventory_sync.observability import metrics
from inventory_sync.observability.logger import get_logger, log_operation

from .aggregator import OrderAggregates, OrderAggregator
from .orders import OrderLogReader

logger = get_logger(__name__)

SUMMARY_SHEET = "Orders Summary"
DETAIL_SHEET = "Detailed Orders"
ANALYTICS_SHEET = "Analytics"
CUSTOMERS_SHEET = "Customers"

DATE_FORMAT = "DD/MM/YYYY"
DATETIME_FORMAT = "DD/MM/YYYY HH:MM"

ALT_ROW_FILL = "F8F9FA"
GREEN = "28A745"
RED = "DC3545"
BLUE = "007BFF"
SECTION_COLOR = "4472C4"

PAYMENT_COLORS = {"completed": GREEN, "failed": RED}
ORDER_COLORS = {"delivered": GREEN, "cancelled": RED, "shipped": BLUE}

_THIN = Side(style="thin")
CELL_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)

SUMMARY_COLUMNS = [
    ("Order ID", 20), ("Date", 12), ("Customer Name", 25), ("Phone", 15),
    ("Total Amount", 15), ("Payment Status", 15), ("Order Status", 15),
    ("Items Count", 12), ("City", 15), ("State", 15),
]
DETAIL_COLUMNS = [
    ("Order ID", 20), ("Date & Time", 18), ("Customer Name", 25), ("Email", 30),
    ("Phone", 15), ("Items Details", 40), ("Total Amount", 15), ("Payment ID", 25),
    ("Payment Status", 15), ("Order Status", 15), ("Full Address", 50),
    ("Estimated Delivery", 18), ("Notes", 30),
]
CUSTOMER_COLUMNS = [
    ("Customer Name", 25), ("Email", 30), ("Phone", 15), ("Total Orders", 12),
    ("Total Spent", 15), ("Average Order", 15), ("Last Order", 18),
    ("City", 15), ("State", 15),
]


def _apply_header_style(ws, fill_color: str) -> None:
    header_fill = PatternFill("solid", fgColor=fill_color)
    header_font = Font(color="FFFFFF", bold=True)
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _write_header(ws, columns: list[tuple[str, int]], fill_color: str) -> None:
    ws.append([title for title, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    _apply_header_style(ws, fill_color)
    ws.freeze_panes = "A2"


def _finish_table(ws, last_row: int, columns: int) -> None:
    for row in ws.iter_rows(min_row=1, max_row=last_row, max_col=columns):
        for cell in row:
            cell.border = CELL_BORDER


def _shade_row(ws, row_idx: int, columns: int) -> None:
    fill = PatternFill("solid", fgColor=ALT_ROW_FILL)
    for col_idx in range(1, columns + 1):
        ws.cell(row=row_idx, column=col_idx).fill = fill


class ReportBuilder:
    """
    Builds the order-book workbook.

    Args:
        currency_format: number_format applied to every money cell
        timezone: Zone order timestamps are shown in (Excel cells carry no
            offset)
        currency_symbol: Prefix for prices inside the item text
    """

    def __init__(self, currency_format: str = "₹#,##0.00", timezone: str = "Asia/Kolkata", currency_symbol: str = "₹"):
        self.currency_format = currency_format
        self.tz = ZoneInfo(timezone)
        self.currency_symbol = currency_symbol

    def build(self, orders: list[OrderRecord], aggregates: OrderAggregates) -> Workbook:
        wb = Workbook()
        wb.properties.creator = "inventory-sync order book"

        summary = wb.active
        summary.title = SUMMARY_SHEET
        self._summary_sheet(summary, orders, aggregates)
        self._detail_sheet(wb.create_sheet(DETAIL_SHEET), orders)
        self._analytics_sheet(wb.create_sheet(ANALYTICS_SHEET), aggregates)
        self._customers_sheet(wb.create_sheet(CUSTOMERS_SHEET), aggregates)
        return wb

    def _local(self, moment: datetime | None) -> datetime | None:
        if moment is None:
            return None
        return moment.astimezone(self.tz).replace(tzinfo=None)

    def _summary_sheet(self, ws, orders: list[OrderRecord], aggregates: OrderAggregates) -> None:
        ws.sheet_properties.tabColor = SECTION_COLOR
        _write_header(ws, SUMMARY_COLUMNS, SECTION_COLOR)

        for index, order in enumerate(orders):
            placed_at = self._local(order.placed_at)
            ws.append([
                order.order_id,
                placed_at.date() if placed_at else None,
                order.customer_name,
                order.customer_phone,
                order.total_amount,
                order.payment_status,
                order.order_status,
                len(order.items),
                order.city,
                order.shipping_address.state if order.shipping_address else "",
            ])
            row_idx = ws.max_row
            if index % 2 == 1:
                _shade_row(ws, row_idx, len(SUMMARY_COLUMNS))
            ws.cell(row=row_idx, column=2).number_format = DATE_FORMAT
            ws.cell(row=row_idx, column=5).number_format = self.currency_format

            payment_color = PAYMENT_COLORS.get(order.payment_status)
            if payment_color:
                ws.cell(row=row_idx, column=6).font = Font(color=payment_color)
            order_color = ORDER_COLORS.get(order.order_status)
            if order_color:
                ws.cell(row=row_idx, column=7).font = Font(color=order_color)

        _finish_table(ws, ws.max_row, len(SUMMARY_COLUMNS))

        ws.append([])
        ws.append(["SUMMARY STATISTICS"])
        ws.cell(row=ws.max_row, column=1).font = Font(bold=True, size=12)
        stats: list[tuple[str, Any, bool]] = [
            ("Total Orders:", aggregates.total_orders, False),
            ("Completed Orders:", aggregates.completed_payments, False),
            ("Total Revenue:", aggregates.total_revenue, True),
            ("Average Order Value:", aggregates.average_order_value, True),
        ]
        for label, value, is_money in stats:
            ws.append([label, value])
            if is_money:
                ws.cell(row=ws.max_row, column=2).number_format = self.currency_format

    def _detail_sheet(self, ws, orders: list[OrderRecord]) -> None:
        ws.sheet_properties.tabColor = GREEN
        _write_header(ws, DETAIL_COLUMNS, GREEN)
        wrap = Alignment(wrap_text=True, vertical="top")

        for index, order in enumerate(orders):
            ws.append([
                order.order_id,
                self._local(order.placed_at),
                order.customer_name,
                order.customer_email,
                order.customer_phone,
                order.items_text(self.currency_symbol),
                order.total_amount,
                order.payment_id,
                order.payment_status,
                order.order_status,
                order.shipping_address.one_line() if order.shipping_address else "",
                order.estimated_delivery,
                order.notes,
            ])
            row_idx = ws.max_row
            ws.row_dimensions[row_idx].height = 30
            if index % 2 == 1:
                _shade_row(ws, row_idx, len(DETAIL_COLUMNS))
            ws.cell(row=row_idx, column=2).number_format = DATETIME_FORMAT
            ws.cell(row=row_idx, column=6).alignment = wrap
            ws.cell(row=row_idx, column=7).number_format = self.currency_format
            ws.cell(row=row_idx, column=11).alignment = wrap

        _finish_table(ws, ws.max_row, len(DETAIL_COLUMNS))

    def _analytics_sheet(self, ws, aggregates: OrderAggregates) -> None:
        ws.sheet_properties.tabColor = "FF6B35"
        section_font = Font(bold=True, size=12, color=SECTION_COLOR)
        header_font = Font(bold=True)

        def section(title: str, headers: list[str], rows: list[list[Any]], date_column: bool = False) -> None:
            ws.append([title])
            ws.cell(row=ws.max_row, column=1).font = section_font
            ws.append(headers)
            for cell in ws[ws.max_row]:
                cell.font = header_font
            for values in rows:
                ws.append(values)
                if date_column:
                    ws.cell(row=ws.max_row, column=1).number_format = DATE_FORMAT
                ws.cell(row=ws.max_row, column=3).number_format = self.currency_format
            ws.append([])
            ws.append([])

        section(
            f"DAILY STATISTICS (LAST {len(aggregates.daily)} DAYS)",
            ["Date", "Orders", "Revenue"],
            [[d.day, d.count, d.revenue] for d in aggregates.daily],
            date_column=True,
        )
        section(
            "ORDER STATUS BREAKDOWN",
            ["Status", "Count", "Revenue"],
            [[g.key.upper(), g.count, g.revenue] for g in aggregates.by_status],
        )
        section(
            "STATE-WISE ORDERS",
            ["State", "Orders", "Revenue"],
            [[g.key, g.count, g.revenue] for g in aggregates.by_region],
        )

        for letter, width in (("A", 20), ("B", 15), ("C", 20)):
            ws.column_dimensions[letter].width = width

    def _customers_sheet(self, ws, aggregates: OrderAggregates) -> None:
        ws.sheet_properties.tabColor = "9B59B6"
        _write_header(ws, CUSTOMER_COLUMNS, "9B59B6")

        for index, customer in enumerate(aggregates.customers):
            last_order = self._local(customer.last_order_at)
            ws.append([
                customer.name,
                customer.email,
                customer.phone,
                customer.order_count,
                customer.total_spent,
                customer.average_order_value,
                last_order.date() if last_order else None,
                customer.city,
                customer.state,
            ])
            row_idx = ws.max_row
            if index % 2 == 1:
                _shade_row(ws, row_idx, len(CUSTOMER_COLUMNS))
            ws.cell(row=row_idx, column=5).number_format = self.currency_format
            ws.cell(row=row_idx, column=6).number_format = self.currency_format
            ws.cell(row=row_idx, column=7).number_format = DATE_FORMAT

        _finish_table(ws, ws.max_row, len(CUSTOMER_COLUMNS))


def save_workbook(wb: Workbook, path: Path) -> None:
    """Save next to ``path`` and move into place, so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".xlsx")
    os.close(fd)
    try:
        wb.save(tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class ReportService:
    """
    Generates the dated order book and refreshes the master copy.

    Args:
        config: Report settings (paths, timezone, currency format)
        reader: Order log reader (defaults to config.order_log)
        clock: Returns the current time (decides the default report date)
    """

    def __init__(
        self,
        config: ReportConfig,
        reader: OrderLogReader | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.reader = reader or OrderLogReader(config.order_log)
        self.aggregator = OrderAggregator(config.timezone)
        self.builder = ReportBuilder(config.currency_format, config.timezone, config.currency_symbol)
        self.clock = clock or (lambda: datetime.now(ZoneInfo(config.timezone)))

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    @property
    def master_path(self) -> Path:
        master = Path(self.config.master_file)
        return master if master.is_absolute() else self.output_dir / master

    def artifact_path(self, as_of: date) -> Path:
        return self.output_dir / f"{self.config.file_prefix}{as_of.isoformat()}.xlsx"

    def today(self) -> date:
        return self.clock().astimezone(ZoneInfo(self.config.timezone)).date()

    def generate(self, as_of: date | None = None) -> Path | None:
        """
        Build and save the order book for ``as_of`` (default: today).

        Returns:
            The dated artifact, or None when there are no orders

        Raises:
            ReportError: The order log is unreadable or an artifact cannot be saved
        """
        as_of = as_of or self.today()
        with log_operation("Generating order book", logger=logger, as_of=as_of.isoformat()):
            try:
                orders = self.reader.read()
            except ReportError:
                metrics.increment_counter(metrics.reports_generated_total, status="failure")
                raise

            if not orders:
                logger.info("No orders found, no order book written")
                metrics.increment_counter(metrics.reports_generated_total, status="empty")
                return None

            aggregates = self.aggregator.aggregate(orders, as_of)
            wb = self.builder.build(orders, aggregates)

            path = self.artifact_path(as_of)
            try:
                save_workbook(wb, path)
                save_workbook(wb, self.master_path)
            except OSError as e:
                metrics.increment_counter(metrics.reports_generated_total, status="failure")
                raise ReportError(f"Cannot save order book {path}: {e}") from e

        metrics.increment_counter(metrics.reports_generated_total, status="success")
        metrics.report_orders.set(aggregates.total_orders)
        logger.info(
            f"Order book written: {path.name} ({aggregates.total_orders} orders, "
            f"revenue {aggregates.total_revenue:,.2f})",
            extra={"artifact": str(path), "master": str(self.master_path),
                   "orders": aggregates.total_orders, "revenue": aggregates.total_revenue},
        )
        return path
