"""
Integration tests for order-book workbook generation.
"""

from datetime import date, datetime

import pytest
from openpyxl import load_workbook

from inventory_sync.core.config import ReportConfig
from inventory_sync.core.errors import ReportError
from inventory_sync.reporting import ReportService
from inventory_sync.reporting.report_builder import (
    ANALYTICS_SHEET,
    CUSTOMERS_SHEET,
    DETAIL_SHEET,
    SUMMARY_SHEET,
)


@pytest.fixture
def report_config(tmp_path):
    return ReportConfig(order_log=tmp_path / "orders.json", output_dir=tmp_path / "order-books")


def find_row(ws, label):
    for row in ws.iter_rows(values_only=True):
        if row and row[0] == label:
            return row
    raise AssertionError(f"{label!r} not found in {ws.title}")


@pytest.mark.integration
def test_workbook_sheets_and_values(report_config, sample_orders, write_orders):
    write_orders(report_config.order_log, sample_orders)

    path = ReportService(report_config).generate(date(2025, 3, 1))

    assert path.name == "Nurvi-Jewel-Order-Book-2025-03-01.xlsx"
    wb = load_workbook(path)
    assert wb.sheetnames == [SUMMARY_SHEET, DETAIL_SHEET, ANALYTICS_SHEET, CUSTOMERS_SHEET]

    summary = wb[SUMMARY_SHEET]
    assert summary["A1"].value == "Order ID"
    assert [summary.cell(row=r, column=1).value for r in range(2, 5)] == ["NJ1001", "NJ1002", "NJ1003"]
    assert summary["E2"].value == 100
    assert summary["E2"].number_format == "₹#,##0.00"
    assert find_row(summary, "Total Orders:")[1] == 3
    assert find_row(summary, "Completed Orders:")[1] == 2
    assert find_row(summary, "Total Revenue:")[1] == 600
    assert find_row(summary, "Average Order Value:")[1] == 200

    detail = wb[DETAIL_SHEET]
    assert detail["B2"].value == datetime(2025, 3, 1, 9, 30)  # 04:00Z shown in IST
    assert detail["F2"].value == "Pearl Drop Earrings (Qty: 1, ₹100)"
    assert detail["K2"].value == "12 MG Road, Pune, Maharashtra - 411001"

    analytics = wb[ANALYTICS_SHEET]
    assert analytics["A1"].value == "DAILY STATISTICS (LAST 30 DAYS)"
    assert analytics["B3"].value == 1
    assert analytics["C3"].value == 100
    assert find_row(analytics, "PROCESSING")[1:] == (2, 400)
    assert find_row(analytics, "Karnataka")[1:] == (1, 200)

    customers = wb[CUSTOMERS_SHEET]
    assert [customers.cell(row=r, column=2).value for r in (2, 3)] == ["asha@example.com", "ravi@example.com"]
    assert customers["D2"].value == 2
    assert customers["E2"].value == 400


@pytest.mark.integration
def test_order_date_fills_both_sheets(report_config, make_order, write_orders):
    order = make_order("NJ1004", 250, None)
    del order["createdAt"]
    order["orderDate"] = "2025-03-01T04:00:00.000Z"
    write_orders(report_config.order_log, [order])

    wb = load_workbook(ReportService(report_config).generate(date(2025, 3, 1)))

    assert wb[DETAIL_SHEET]["B2"].value == datetime(2025, 3, 1, 9, 30)
    assert wb[SUMMARY_SHEET]["B2"].value == datetime(2025, 3, 1)


@pytest.mark.integration
def test_master_copy_refreshed(report_config, sample_orders, write_orders):
    write_orders(report_config.order_log, sample_orders)
    service = ReportService(report_config)

    service.generate(date(2025, 3, 1))
    write_orders(report_config.order_log, sample_orders[:1])
    service.generate(date(2025, 3, 2))

    master = load_workbook(service.master_path)
    assert find_row(master[SUMMARY_SHEET], "Total Orders:")[1] == 1
    assert service.artifact_path(date(2025, 3, 1)).exists()
    assert service.artifact_path(date(2025, 3, 2)).exists()


@pytest.mark.integration
def test_no_orders_means_no_artifact(report_config):
    assert ReportService(report_config).generate(date(2025, 3, 1)) is None
    assert not report_config.output_dir.exists()


@pytest.mark.integration
def test_corrupt_order_log_raises(report_config):
    report_config.order_log.write_text("not json", encoding="utf-8")

    with pytest.raises(ReportError):
        ReportService(report_config).generate(date(2025, 3, 1))


@pytest.mark.integration
def test_unwritable_output_raises(report_config, sample_orders, write_orders, tmp_path):
    write_orders(report_config.order_log, sample_orders)
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    report_config.output_dir = blocker / "books"

    with pytest.raises(ReportError, match="Cannot save"):
        ReportService(report_config).generate(date(2025, 3, 1))


@pytest.mark.integration
def test_default_date_is_today_in_report_timezone(report_config, sample_orders, write_orders):
    write_orders(report_config.order_log, sample_orders)
    # 2025-03-01 20:00 UTC is already 2025-03-02 in India
    service = ReportService(report_config, clock=lambda: datetime.fromisoformat("2025-03-01T20:00:00+00:00"))

    path = service.generate()

    assert path.name.endswith("2025-03-02.xlsx")
