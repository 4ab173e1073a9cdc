"""
CSV reader for catalog exports.
"""

import csv
from pathlib import Path

from inventory_sync.core.errors import SourceReadError

from .sheet import SheetData


class CSVReader:
    """
    Reads a header row plus data rows from a CSV export.

    Spreadsheet exports usually carry a UTF-8 BOM; ``utf-8-sig`` drops it.
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig"):
        self.delimiter = delimiter
        self.encoding = encoding

    def read(self, file_path: str | Path) -> SheetData:
        path = Path(file_path)
        try:
            with open(path, newline="", encoding=self.encoding) as f:
                rows = list(csv.reader(f, delimiter=self.delimiter))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise SourceReadError(f"Cannot read CSV {path}: {e}") from e

        if not rows:
            raise SourceReadError(f"{path} is empty")

        # Empty CSV fields are None, matching what openpyxl yields for blank cells
        data = [
            (number, tuple(cell if cell != "" else None for cell in row))
            for number, row in enumerate(rows[1:], start=2)
        ]
        return SheetData(headers=list(rows[0]), rows=data)
