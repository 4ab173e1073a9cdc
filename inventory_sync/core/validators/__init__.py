"""
Row validation rules.

Provides validators for required cells and marker rows, plus the
RowValidator that applies them to mapped spreadsheet rows.
"""

from .base_validator import BaseValidator, ValidationError
from .required_field_validator import RequiredFieldValidator
from .row_validator import RowValidator, find_duplicates
from .sentinel_row_validator import SentinelRowValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "SentinelRowValidator",
    "RowValidator",
    "find_duplicates",
]
