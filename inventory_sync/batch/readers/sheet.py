"""
Raw sheet contents shared by the readers.
"""

from typing import Any

from pydantic import BaseModel


class SheetData(BaseModel):
    """
    Raw header row plus numbered data rows.

    Attributes:
        headers: Header cells as found in row 1
        rows: (spreadsheet row number, cells) pairs; the first data row is 2
    """

    headers: list[Any]
    rows: list[tuple[int, tuple[Any, ...]]]
