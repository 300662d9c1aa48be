"""Date normalisation for spreadsheet cells.

Prospecting sheets mix three encodings in the same column: spreadsheet
serial numbers (exported date cells), Brazilian ``DD/MM/YYYY`` text, and
whatever else people type. Everything is reduced to a plain ``datetime.date``
or ``None``; time of day is never meaningful here.
"""

from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

from core.fields import as_text


SPREADSHEET_EPOCH = date(1899, 12, 30)
# Numbers at or below this are never read as serials (40000 ~ July 2009).
SERIAL_THRESHOLD = 40000

_LEADING_INT = re.compile(r"\s*(\d+)")
_NUMERIC = re.compile(r"[+-]?\d+(\.\d+)?")


def _serial_to_date(serial: float) -> Optional[date]:
    try:
        return SPREADSHEET_EPOCH + timedelta(days=math.floor(serial))
    except OverflowError:
        return None


def _as_number(s: str) -> Optional[float]:
    if not _NUMERIC.fullmatch(s):
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _leading_int(part: str) -> Optional[int]:
    match = _LEADING_INT.match(part)
    return int(match.group(1)) if match else None


def _parse_day_month_year(s: str) -> Optional[date]:
    day, month, year = (_leading_int(p) for p in s.split("/"))
    if day is None or month is None or year is None:
        return None
    # two-digit years belong to this century
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_generic(s: str) -> Optional[date]:
    with warnings.catch_warnings():
        # free-form input: silence pandas format-inference warnings
        warnings.simplefilter("ignore", UserWarning)
        try:
            parsed = pd.to_datetime(s, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(raw: Any) -> Optional[date]:
    """Parse a date cell. Never raises; returns None for empty or unparseable input.

    Resolution order: spreadsheet serial (> 40000), ``DD/MM/YYYY``, generic parse.
    Numbers at or below the serial threshold skip the serial rule and go
    through the remaining rules like any other text.
    """
    s = as_text(raw)
    if not s:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    number = _as_number(s)
    if number is not None and number > SERIAL_THRESHOLD:
        return _serial_to_date(number)

    if "/" in s and len(s.split("/")) == 3:
        return _parse_day_month_year(s)

    return _parse_generic(s)


def format_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return f"{value.day:02d}/{value.month:02d}/{value.year}"
