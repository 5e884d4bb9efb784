from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from ..models.cell import CellKind, as_cell

"""Temporal decoder: raw cell -> ISO date / zero-padded clock time.

Transcribed sheets hold dates and times as native cells, Excel serial
numbers or free-form strings. Both decoders are total: anything ambiguous
or invalid yields None.
"""

__all__ = [
    "decode_date",
    "decode_time",
    "excel_serial_to_date",
    "fraction_to_clock",
]

# Excel 1900 date system (the 1900 leap-year bug is absorbed by the 12-30 epoch)
EXCEL_EPOCH = date(1899, 12, 30)
MAX_EXCEL_SERIAL = 2958465  # 9999-12-31
SECONDS_PER_DAY = 86400

_HM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_HMS_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")
_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def excel_serial_to_date(serial: float) -> date | None:
    """Calendar date for an Excel serial day number (fraction ignored)."""
    if not math.isfinite(serial):
        return None
    days = math.trunc(serial)
    if days < 1 or days > MAX_EXCEL_SERIAL:
        return None
    return EXCEL_EPOCH + timedelta(days=days)


def _parse_date_text(text: str) -> date | None:
    if _NUMERIC_RE.match(text):
        return excel_serial_to_date(float(text))
    if _HM_RE.match(text) or _HMS_RE.match(text):
        # a bare clock would otherwise be dated today
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    # wall-clock date as written; an offset never moves the day
    return date(ts.year, ts.month, ts.day)


def decode_date(value: Any) -> str | None:
    """ISO calendar date (YYYY-MM-DD) or None.

    Accepts native date/datetime cells (time of day dropped), Excel serial
    day numbers and parseable date text. Decoding an already decoded ISO
    string returns the same string.
    """
    cell = as_cell(value)
    kind = cell.kind
    if kind is CellKind.DATE:
        v = cell.value
        return date(v.year, v.month, v.day).isoformat()
    if kind is CellKind.NUMBER:
        d = excel_serial_to_date(float(cell.value))
        return d.isoformat() if d else None
    if kind is CellKind.TEXT:
        d = _parse_date_text(cell.value.strip())
        return d.isoformat() if d else None
    # EMPTY, BOOLEAN, TIME
    return None


def fraction_to_clock(fraction: float) -> str | None:
    """HH:MM:SS for an Excel fractional day strictly between 0 and 1."""
    if not (0 < fraction < 1):
        return None
    total = int(math.floor(fraction * SECONDS_PER_DAY + 0.5))  # half-up
    total = min(total, SECONDS_PER_DAY - 1)
    hh, rem = divmod(total, 3600)
    mm, ss = divmod(rem, 60)
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def _clock(h: str, m: str, s: str = "00") -> str | None:
    hh, mm, ss = int(h), int(m), int(s)
    if hh > 23 or mm > 59 or ss > 59:
        return None
    return f"{hh:02d}:{m}:{s}"


def decode_time(value: Any) -> str | None:
    """Zero-padded HH:MM:SS or None.

    Numbers are only read as time when they are a fractional day in the
    open interval (0, 1); 0, 1 and plain integers are never times.
    """
    cell = as_cell(value)
    kind = cell.kind
    if kind is CellKind.TIME:
        return cell.value.strftime("%H:%M:%S")
    if kind is CellKind.DATE:
        v = cell.value
        if isinstance(v, datetime):
            return v.strftime("%H:%M:%S")
        return None
    if kind is CellKind.NUMBER:
        return fraction_to_clock(float(cell.value))
    if kind is CellKind.TEXT:
        text = cell.value.strip()
        m = _HM_RE.match(text)
        if m:
            return _clock(m.group(1), m.group(2))
        m = _HMS_RE.match(text)
        if m:
            return _clock(m.group(1), m.group(2), m.group(3))
        if _NUMERIC_RE.match(text):
            return fraction_to_clock(float(text))
        return None
    # EMPTY, BOOLEAN
    return None
