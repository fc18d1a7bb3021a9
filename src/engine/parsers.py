"""
Parsers for values coming out of spreadsheet exports.

Spreadsheet cells arrive as whatever the export produced: strings, floats
with NaN for blanks, dates in a handful of regional formats. These helpers
turn them into the plain Python values SalesRecord expects, never raising
on bad input.
"""

import math
import numbers
import re
from datetime import date, datetime

import pandas as pd


class DateParser:
    """
    Date parser that tries the formats commonly typed into sales sheets.

    To extend: pass custom_formats, they are tried before the defaults.
    """

    DATE_FORMATS = [
        "%Y-%m-%d",      # ISO: 2024-07-25
        "%m/%d/%Y",      # US: 05/27/2024
        "%d-%m-%Y",      # EU: 25-08-2024
        "%m/%d/%y",      # US short: 03/21/24
        "%d/%m/%Y",      # EU slash: 25/08/2024
        "%Y/%m/%d",      # ISO slash: 2024/07/25
        "%Y-%m-%d %H:%M:%S",
    ]

    def __init__(self, custom_formats: list[str] | None = None):
        self.formats = (custom_formats or []) + self.DATE_FORMATS
        self._cache: dict[str, date | None] = {}

    def parse(self, value) -> date | None:
        """Parse a cell into a date, or None if no format matches."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if value is None or pd.isna(value) or not str(value).strip():
            return None

        date_str = str(value).strip()

        if date_str in self._cache:
            return self._cache[date_str]

        for fmt in self.formats:
            try:
                result = datetime.strptime(date_str, fmt).date()
                self._cache[date_str] = result
                return result
            except ValueError:
                continue

        self._cache[date_str] = None
        return None

    def parse_series(self, series: pd.Series) -> pd.Series:
        return series.apply(self.parse)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value) -> int:
    """
    Read the leading integer of a cell, 0 when there is none.

    "12" -> 12, "12.9" -> 12, "7 days" -> 7, "" / NaN / "n/a" -> 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return 0
        return int(value)

    match = _LEADING_INT.match(str(value).replace(",", ""))
    return int(match.group(1)) if match else 0


def parse_float(value) -> float:
    """Read the leading decimal number of a cell, 0.0 when there is none."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return 0.0
        return float(value)

    cleaned = str(value).replace(",", "").replace("$", "")
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    result = float(match.group(1))
    return result if math.isfinite(result) else 0.0


def parse_text(value) -> str:
    """Strip a text cell, blanks and NaN become ""."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def normalize_header(name) -> str:
    """
    Normalize a column header for schema comparison.

    "Units Sold", "units_sold" and "unitsSold" all become "unitssold".
    """
    return re.sub(r"[\s_\-]+", "", parse_text(name)).lower()
