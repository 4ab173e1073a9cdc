"""
Lenient cell coercion.

Spreadsheet cells arrive as whatever openpyxl or the csv module produced:
str, int, float, bool, datetime or None. None of these helpers raise; an
unusable value becomes the type's empty value.
"""

import math
import re
from datetime import date, datetime
from typing import Any

TRUE_STRINGS = frozenset({"yes", "true", "1"})

_CURRENCY = re.compile(r"^(rs\.?|inr)\s*", re.IGNORECASE)
_NOISE = re.compile(r"[,\s₹$€£]")


def to_text(value: Any) -> str:
    """
    Cell as trimmed text.

    Integral floats lose their ".0" (xlsx stores 101 as 101.0), dates become
    ISO strings.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def to_number(value: Any) -> float:
    """Cell as float; empty, unparseable, NaN or infinite values give 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        text = _NOISE.sub("", _CURRENCY.sub("", str(value).strip()))
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    return int(round(to_number(value)))


def to_bool(value: Any) -> bool:
    """True for yes/true/1 (any case); everything else is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return to_text(value).lower() in TRUE_STRINGS


def to_list(value: Any, delimiter: str = "|") -> list[str]:
    """Split a delimited cell into trimmed, non-empty items."""
    text = to_text(value)
    if not text:
        return []
    return [item.strip() for item in text.split(delimiter) if item.strip()]
