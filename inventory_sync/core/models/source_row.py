"""
SourceRow model representing one spreadsheet row after header mapping (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, Field


class SourceRow(BaseModel):
    """
    A single spreadsheet data row keyed by canonical field name.

    Note: SourceRow only lives for the duration of one sync run. Headers the
    HeaderMapper could not resolve never reach this model.

    Attributes:
        row_number: 1-based spreadsheet row number (header is row 1)
        values: Canonical field name -> raw cell value
    """

    row_number: int = Field(..., ge=1)
    values: dict[str, Any] = Field(default_factory=dict)

    def text(self, field: str) -> str:
        """Cell value as trimmed text ('' when absent or empty)."""
        value = self.values.get(field)
        if value is None:
            return ""
        return str(value).strip()

    @property
    def product_id(self) -> str:
        return self.text("product_id")

    @property
    def name(self) -> str:
        return self.text("name")

    def is_blank(self) -> bool:
        """True when every mapped cell is empty."""
        return all(self.text(field) == "" for field in self.values)

    class Config:
        json_schema_extra = {
            "example": {
                "row_number": 7,
                "values": {
                    "product_id": "NJ-RNG-001",
                    "name": "Rose Gold Solitaire Ring",
                    "price": "1,500",
                    "colors": "Small|Medium|Large",
                    "sizes": "Gold|Silver",
                },
            }
        }
