"""
Spreadsheet readers for the sync pipeline.
"""

from .csv_reader import CSVReader
from .sheet import SheetData
from .spreadsheet_reader import SpreadsheetReader
from .xlsx_reader import XLSXReader

__all__ = ["SpreadsheetReader", "SheetData", "CSVReader", "XLSXReader"]
