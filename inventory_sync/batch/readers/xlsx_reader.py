"""
Excel reader for the catalog workbook.
"""

from pathlib import Path
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from inventory_sync.core.errors import SourceReadError

from .sheet import SheetData


class XLSXReader:
    """
    Reads the first worksheet (or a named one) of an .xlsx workbook.

    Cached formula results are read, not the formulas.
    """

    def __init__(self, sheet_name: str | None = None):
        self.sheet_name = sheet_name

    def read(self, file_path: str | Path) -> SheetData:
        path = Path(file_path)
        try:
            wb = load_workbook(filename=str(path), read_only=True, data_only=True)
        except (OSError, BadZipFile, InvalidFileException, KeyError) as e:
            raise SourceReadError(f"Cannot open workbook {path}: {e}") from e

        try:
            if self.sheet_name:
                if self.sheet_name not in wb.sheetnames:
                    raise SourceReadError(f"Sheet '{self.sheet_name}' not found in {path}")
                ws = wb[self.sheet_name]
            else:
                ws = wb.worksheets[0]

            rows = ws.iter_rows(values_only=True)
            headers = next(rows, None)
            if headers is None:
                raise SourceReadError(f"{path} has no header row")

            data = [(number, tuple(row)) for number, row in enumerate(rows, start=2)]
        finally:
            wb.close()

        return SheetData(headers=list(headers), rows=data)
