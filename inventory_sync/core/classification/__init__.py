"""
Content-based classification of the colors/sizes columns.
"""

from .field_classifier import (
    DEFAULT_COLOR_KEYWORDS,
    DEFAULT_SIZE_KEYWORDS,
    ClassifiedLists,
    ColumnKind,
    classify_tokens,
    reconcile,
    tokenize,
)

__all__ = [
    "ColumnKind",
    "ClassifiedLists",
    "DEFAULT_COLOR_KEYWORDS",
    "DEFAULT_SIZE_KEYWORDS",
    "classify_tokens",
    "reconcile",
    "tokenize",
]
