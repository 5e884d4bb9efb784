from __future__ import annotations

import zipfile
from pathlib import Path

import pandas as pd

from ..models.cell import Cell, to_cell

"""Workbook reader.

Turns one named sheet of an .xlsx workbook into a raw grid of tagged cells.
No header handling here: the header row position varies per sheet and is
resolved later (clinic_import.excel.headers). Formatting/styling is ignored.
"""

__all__ = [
    "RawRow",
    "SheetGrid",
    "SheetNotFoundError",
    "WorkbookReadError",
    "list_sheet_names",
    "read_sheet_grid",
]

RawRow = tuple[Cell, ...]
SheetGrid = list[RawRow]


class WorkbookReadError(Exception):
    """Raised when the workbook file cannot be opened or decoded."""


class SheetNotFoundError(Exception):
    """Raised when the required sheet does not exist in the workbook."""

    def __init__(self, sheet_name: str, available: list[str] | None = None) -> None:
        self.sheet_name = sheet_name
        self.available = available or []
        super().__init__(f"Sheet not found: {sheet_name}")


def _open(path: Path) -> pd.ExcelFile:
    try:
        return pd.ExcelFile(path, engine="openpyxl")
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise WorkbookReadError(f"cannot read workbook {path}: {e}") from e


def list_sheet_names(path: Path) -> list[str]:
    with _open(path) as xls:
        return [str(n) for n in xls.sheet_names]


def read_sheet_grid(path: Path, sheet_name: str) -> SheetGrid:
    """Read ``sheet_name`` from ``path`` as rows of Cells.

    Cells are read as raw objects (no dtype inference, no NA-string
    conversion) so "NA" typed into a name column stays text. Blank cells come
    back as EMPTY.

    Raises
    ------
    WorkbookReadError: the file is missing or not a readable workbook
    SheetNotFoundError: the workbook has no sheet with that exact name
    """
    with _open(path) as xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name not in names:
            raise SheetNotFoundError(sheet_name, names)
        df = xls.parse(
            sheet_name,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[],
        )
    return [tuple(to_cell(v) for v in row) for row in df.itertuples(index=False, name=None)]
