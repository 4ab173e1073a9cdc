"""
Format dispatch for catalog spreadsheets (.xlsx, .csv).
"""

from pathlib import Path

from inventory_sync.core.errors import SourceReadError
from inventory_sync.observability.logger import get_logger

from .csv_reader import CSVReader
from .sheet import SheetData
from .xlsx_reader import XLSXReader

logger = get_logger(__name__)


class SpreadsheetReader:
    """
    Generic reader choosing the parser by file extension.
    """

    def __init__(self, sheet_name: str | None = None, csv_delimiter: str = ","):
        self.xlsx_reader = XLSXReader(sheet_name)
        self.csv_reader = CSVReader(delimiter=csv_delimiter)

    def read(self, file_path: str | Path) -> SheetData:
        """
        Read a spreadsheet.

        Raises:
            SourceReadError: Missing file, unsupported format or parse failure
        """
        path = Path(file_path)
        if not path.is_file():
            raise SourceReadError(f"Source file not found: {path}")

        suffix = path.suffix.lower()
        if suffix in (".xlsx", ".xlsm"):
            data = self.xlsx_reader.read(path)
        elif suffix == ".csv":
            data = self.csv_reader.read(path)
        else:
            raise SourceReadError(f"Unsupported file format: {suffix or path.name}")

        logger.info(
            f"Read {len(data.rows)} rows from {path.name}",
            extra={"source_file": str(path), "rows": len(data.rows)},
        )
        return data
