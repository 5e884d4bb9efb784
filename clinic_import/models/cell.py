from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

"""Tagged cell value for raw worksheet grids.

The workbook reader hands back whatever pandas/openpyxl decided a cell is
(str, int, float, numpy scalar, Timestamp, time, NaN ...). Every value is
classified once here so the decoders and sanitizers can branch over a closed
set of kinds instead of relying on implicit coercion.
"""

__all__ = [
    "Cell",
    "CellKind",
    "EMPTY_CELL",
    "as_cell",
    "to_cell",
]


class CellKind(Enum):
    """Kind of a single worksheet cell."""
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"  # date or datetime
    TIME = "time"  # time of day


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: Any = None  # EMPTY -> None, TEXT -> str (untrimmed), NUMBER -> float|int, ...

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY


EMPTY_CELL = Cell(CellKind.EMPTY)

_SECONDS_PER_DAY = 86400


def to_cell(value: Any) -> Cell:
    """Classify a raw value coming out of the workbook reader.

    Blank or whitespace-only strings are EMPTY, as are NaN/NaT and
    non-finite numbers.
    """
    if value is None or value is pd.NaT:
        return EMPTY_CELL
    if isinstance(value, (bool, np.bool_)):
        return Cell(CellKind.BOOLEAN, bool(value))
    if isinstance(value, numbers.Integral):
        return Cell(CellKind.NUMBER, int(value))
    if isinstance(value, numbers.Real):
        f = float(value)
        if not math.isfinite(f):
            return EMPTY_CELL
        return Cell(CellKind.NUMBER, f)
    # Timestamp is a datetime subclass, datetime is a date subclass
    if isinstance(value, date):
        return Cell(CellKind.DATE, value)
    if isinstance(value, time):
        return Cell(CellKind.TIME, value)
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
        if 0 <= seconds < _SECONDS_PER_DAY:
            return Cell(
                CellKind.TIME,
                time(seconds // 3600, (seconds % 3600) // 60, seconds % 60),
            )
        return Cell(CellKind.TEXT, str(value))
    if isinstance(value, str):
        if not value.strip():
            return EMPTY_CELL
        return Cell(CellKind.TEXT, value)
    return Cell(CellKind.TEXT, str(value))


def as_cell(value: Any) -> Cell:
    """Return ``value`` unchanged when already a Cell, otherwise classify it."""
    if isinstance(value, Cell):
        return value
    return to_cell(value)
