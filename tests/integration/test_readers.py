"""
Integration tests for the spreadsheet readers.
"""

import pytest

from inventory_sync.batch.readers import SpreadsheetReader
from inventory_sync.core.errors import SourceReadError


@pytest.mark.integration
class TestSpreadsheetReader:
    """Tests for SpreadsheetReader against real files"""

    def test_reads_xlsx_rows_with_numbers(self, tmp_path, write_xlsx):
        path = write_xlsx(tmp_path / "catalog.xlsx", ["Product ID", "Price"], [["NJ-1", 1500], ["NJ-2", None]])

        sheet = SpreadsheetReader().read(path)

        assert sheet.headers == ["Product ID", "Price"]
        assert sheet.rows == [(2, ("NJ-1", 1500)), (3, ("NJ-2", None))]

    def test_reads_named_sheet(self, tmp_path, write_xlsx):
        path = write_xlsx(tmp_path / "catalog.xlsx", ["Product ID"], [["NJ-1"]])

        assert SpreadsheetReader(sheet_name="Inventory").read(path).rows == [(2, ("NJ-1",))]
        with pytest.raises(SourceReadError, match="not found"):
            SpreadsheetReader(sheet_name="Archive").read(path)

    def test_reads_csv_with_bom(self, tmp_path, write_csv):
        path = write_csv(tmp_path / "catalog.csv", ["Product ID", "Name"], [["NJ-1", ""], ["NJ-2", "Ring"]])

        sheet = SpreadsheetReader().read(path)

        assert sheet.headers == ["Product ID", "Name"]
        assert sheet.rows == [(2, ("NJ-1", None)), (3, ("NJ-2", "Ring"))]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceReadError, match="not found"):
            SpreadsheetReader().read(tmp_path / "absent.xlsx")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "catalog.ods"
        path.write_bytes(b"")

        with pytest.raises(SourceReadError, match="Unsupported"):
            SpreadsheetReader().read(path)

    def test_corrupt_workbook(self, tmp_path):
        path = tmp_path / "catalog.xlsx"
        path.write_bytes(b"this is not a zip archive")

        with pytest.raises(SourceReadError, match="Cannot open"):
            SpreadsheetReader().read(path)
