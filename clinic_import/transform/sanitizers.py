from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from ..models.cell import CellKind, as_cell

"""Field sanitizers: one raw cell -> one constrained scalar.

All functions are total over cell values: anything that cannot be
normalized becomes None instead of raising.
"""

__all__ = [
    "DEFAULT_MAX_INT",
    "DEFAULT_MIN_INT",
    "bounded_int",
    "clean_text",
    "is_marked",
]

DEFAULT_MIN_INT = 0
DEFAULT_MAX_INT = 120


def _to_number(value: Any) -> float | None:
    cell = as_cell(value)
    if cell.kind is CellKind.NUMBER:
        return float(cell.value)
    if cell.kind is CellKind.TEXT:
        try:
            n = float(cell.value.strip())
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    # EMPTY, BOOLEAN, DATE, TIME are not counts
    return None


def bounded_int(value: Any, min_value: int = DEFAULT_MIN_INT, max_value: int = DEFAULT_MAX_INT) -> int | None:
    """Integer in [min_value, max_value] or None.

    Values strictly between 0 and 1 are rejected: that is an Excel time
    fraction that ended up in a numeric column. Fractions are truncated
    toward zero before the range check.
    """
    n = _to_number(value)
    if n is None:
        return None
    if 0 < n < 1:
        return None
    x = math.trunc(n)
    if x < min_value or x > max_value:
        return None
    return x


def _render_number(n: int | float) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


def clean_text(value: Any) -> str | None:
    """Trimmed text or None for empty / whitespace-only cells."""
    cell = as_cell(value)
    kind = cell.kind
    if kind is CellKind.EMPTY:
        return None
    if kind is CellKind.TEXT:
        text = cell.value.strip()
    elif kind is CellKind.NUMBER:
        text = _render_number(cell.value)
    elif kind is CellKind.BOOLEAN:
        text = "TRUE" if cell.value else "FALSE"
    elif kind is CellKind.DATE:
        v = cell.value
        if isinstance(v, datetime) and (v.hour, v.minute, v.second, v.microsecond) != (0, 0, 0, 0):
            text = v.isoformat(sep=" ")
        else:
            text = v.strftime("%Y-%m-%d")
    elif kind is CellKind.TIME:
        text = cell.value.strftime("%H:%M:%S")
    else:  # pragma: no cover - CellKind is closed
        raise ValueError(f"unknown cell kind: {kind}")
    return text or None


def is_marked(value: Any) -> bool:
    """Truthiness of a marker cell (symptom present / absent)."""
    cell = as_cell(value)
    kind = cell.kind
    if kind is CellKind.EMPTY:
        return False
    if kind is CellKind.TEXT:
        return bool(cell.value.strip())
    if kind is CellKind.NUMBER:
        return cell.value != 0
    if kind is CellKind.BOOLEAN:
        return bool(cell.value)
    # DATE / TIME: something was written in the cell
    return True
