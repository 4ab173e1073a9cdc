"""
Spreadsheet header resolution.
"""

from .header_mapper import (
    DEFAULT_SYNONYMS,
    REQUIRED_FIELDS,
    SOURCE_FIELDS,
    HeaderMapper,
    HeaderMapping,
    normalize_header,
    repair_mojibake,
)

__all__ = [
    "HeaderMapper",
    "HeaderMapping",
    "DEFAULT_SYNONYMS",
    "REQUIRED_FIELDS",
    "SOURCE_FIELDS",
    "normalize_header",
    "repair_mojibake",
]
