from __future__ import annotations

from pathlib import Path

import pytest

from clinic_import.excel.reader import (
    SheetNotFoundError,
    WorkbookReadError,
    list_sheet_names,
    read_sheet_grid,
)
from clinic_import.models.cell import Cell, CellKind


def test_read_sheet_grid_keeps_raw_cell_types(make_workbook):
    wb = make_workbook("bp.xlsx", {
        "BP Monitoring": [
            ["Date", "Time", "Name", "Age"],
            ["2025-03-01", 0.5, "NA", 45],
            [None, "9:05", "", 37.5],
        ],
    })
    grid = read_sheet_grid(wb, "BP Monitoring")
    assert len(grid) == 3
    assert grid[0][0] == Cell(CellKind.TEXT, "Date")
    row = grid[1]
    assert row[1] == Cell(CellKind.NUMBER, 0.5)
    assert row[2] == Cell(CellKind.TEXT, "NA")  # not converted to missing
    assert row[3] == Cell(CellKind.NUMBER, 45)
    assert grid[2][0].is_empty
    assert grid[2][2].is_empty


def test_read_sheet_grid_keeps_banner_rows(make_workbook):
    wb = make_workbook("in.xlsx", {
        "In-Patient Record": [["IN-PATIENT RECORD"], ["2025"], ["Date", "Name"], ["2025-03-01", "Ana"]],
    })
    grid = read_sheet_grid(wb, "In-Patient Record")
    assert grid[2][1] == Cell(CellKind.TEXT, "Name")
    assert grid[0][1].is_empty


def test_missing_sheet(make_workbook):
    wb = make_workbook("bp.xlsx", {"Sheet1": [["Date"]]})
    with pytest.raises(SheetNotFoundError) as exc_info:
        read_sheet_grid(wb, "BP Monitoring")
    assert str(exc_info.value) == "Sheet not found: BP Monitoring"
    assert exc_info.value.available == ["Sheet1"]


def test_sheet_names_are_exact(make_workbook):
    wb = make_workbook("bp.xlsx", {"bp monitoring": [["Date"]]})
    assert list_sheet_names(wb) == ["bp monitoring"]
    with pytest.raises(SheetNotFoundError):
        read_sheet_grid(wb, "BP Monitoring")


def test_missing_file(tmp_path: Path):
    with pytest.raises(WorkbookReadError):
        read_sheet_grid(tmp_path / "nope.xlsx", "BP Monitoring")


def test_not_a_workbook(tmp_path: Path):
    bogus = tmp_path / "bogus.xlsx"
    bogus.write_text("not a zip", encoding="utf-8")
    with pytest.raises(WorkbookReadError):
        read_sheet_grid(bogus, "BP Monitoring")
