"""
Field classifier for the colors/sizes columns.

Catalog authors regularly type sizes into the colors column and colors into
the sizes column. These functions look at cell content, decide what each
column really holds, and route the values to the right field. They are pure:
no I/O, no configuration lookups, no logging.
"""

import re
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, Field

DEFAULT_COLOR_KEYWORDS = (
    "gold", "silver", "rose gold", "white gold", "black", "white", "red",
    "blue", "green", "pink", "purple", "yellow", "bronze", "copper", "platinum",
)

DEFAULT_SIZE_KEYWORDS = (
    "small", "medium", "large", "xs", "xl", "xxl", "inches", "cm", "mm",
    "adjustable", "one size", "diameter", "length", "width",
)


class ColumnKind(str, Enum):
    COLORS = "colors"
    SIZES = "sizes"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class ClassifiedLists(BaseModel):
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    swapped: bool = False


def tokenize(cell: Any, delimiter: str = "|") -> list[str]:
    """Split a delimited cell into trimmed, non-empty tokens."""
    if cell is None:
        return []
    return [token.strip() for token in str(cell).split(delimiter) if token.strip()]


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern:
    # Letters on either side break the match, digits do not ("18cm" is a size,
    # "redwood" is not a color).
    alternatives = sorted({k.lower() for k in keywords if k}, key=len, reverse=True)
    if not alternatives:
        return re.compile(r"(?!x)x")
    body = "|".join(re.escape(k) for k in alternatives)
    return re.compile(rf"(?<![a-z])(?:{body})(?![a-z])")


def classify_tokens(
    tokens: list[str],
    color_keywords: Iterable[str] = DEFAULT_COLOR_KEYWORDS,
    size_keywords: Iterable[str] = DEFAULT_SIZE_KEYWORDS,
) -> ColumnKind:
    """
    Decide what a column's tokens describe.

    COLORS when only color keywords appear, SIZES when only size keywords
    appear, MIXED when both do, UNKNOWN when neither does (or no tokens).
    """
    color_pattern = _keyword_pattern(color_keywords)
    size_pattern = _keyword_pattern(size_keywords)

    has_colors = any(color_pattern.search(token.lower()) for token in tokens)
    has_sizes = any(size_pattern.search(token.lower()) for token in tokens)

    if has_colors and not has_sizes:
        return ColumnKind.COLORS
    if has_sizes and not has_colors:
        return ColumnKind.SIZES
    if has_colors and has_sizes:
        return ColumnKind.MIXED
    return ColumnKind.UNKNOWN


def reconcile(
    colors_cell: Any,
    sizes_cell: Any,
    color_keywords: Iterable[str] = DEFAULT_COLOR_KEYWORDS,
    size_keywords: Iterable[str] = DEFAULT_SIZE_KEYWORDS,
    delimiter: str = "|",
) -> ClassifiedLists:
    """
    Route the nominal colors/sizes cells to the fields their content describes.

    - Both columns cross-classified (colors look like sizes and sizes look
      like colors): swap.
    - One column cross-classified and the other empty: move it across.
    - Anything else (MIXED, UNKNOWN, already correct): keep nominal.
    """
    color_keywords = tuple(color_keywords)
    size_keywords = tuple(size_keywords)

    colors = tokenize(colors_cell, delimiter)
    sizes = tokenize(sizes_cell, delimiter)

    colors_kind = classify_tokens(colors, color_keywords, size_keywords)
    sizes_kind = classify_tokens(sizes, color_keywords, size_keywords)

    if colors_kind == ColumnKind.SIZES and sizes_kind == ColumnKind.COLORS:
        return ClassifiedLists(colors=sizes, sizes=colors, swapped=True)
    if colors_kind == ColumnKind.SIZES and not sizes:
        return ClassifiedLists(colors=[], sizes=colors, swapped=True)
    if sizes_kind == ColumnKind.COLORS and not colors:
        return ClassifiedLists(colors=sizes, sizes=[], swapped=True)
    return ClassifiedLists(colors=colors, sizes=sizes)
