# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from clinic_import.logging.init import reset_logging

CHECKUP_HEADER = ["Date", "Employee Name", "Symptoms", "Remarks"]
BP_HEADER = ["Date", "Time", "Name", "Age", "Designation", "BP", "Intervention"]
INPATIENT_HEADER = [
    "Date", "Time", "Name", "Age", "Department", "Chief Complaint",
    "Fever", "Cough", "Headache",
    "Temp", "BP", "Intervention", "Evaluation", "Medication",
]


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Write raw grids (no pandas header/index) to an .xlsx file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[[str, dict[str, list[list[Any]]]], Path]:
    def _make(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        return write_workbook(temp_workdir / "data" / name, sheets)
    return _make


@pytest.fixture()
def clinic_workbooks(make_workbook) -> dict[str, Path]:
    """One small workbook per import kind, laid out like the legacy sheets."""
    bp = make_workbook("BP.xlsx", {
        "BP Monitoring": [
            BP_HEADER,
            ["2025-03-01", "9:05", "Juan Dela Cruz", 45, "Operator", "120/80", "Rest"],
            ["2025-03-02", 0.5, "Maria Santos", 0.5, "Clerk", "140 / 90", None],
            [None, "10:00", "No Date", 30, "Clerk", "110/70", None],
        ],
    })
    checkup = make_workbook("For check up.xlsx", {
        "For Check-up": [
            CHECKUP_HEADER,
            ["2025-03-01", "Juan Dela Cruz", "fever", "rest advised"],
            ["2025-03-02", None, "cough", None],
        ],
    })
    inpatient = make_workbook("In patient.xlsx", {
        "In-Patient Record": [
            ["IN-PATIENT RECORD"],
            ["2025"],
            INPATIENT_HEADER,
            ["2025-03-01", "8:30", "Ana Reyes", 33, "QA", "Dizzy", "/", None, "/",
             37.8, "130/85", "Paracetamol", "Back to work", "Paracetamol 500mg"],
            ["2025-03-01", "8:45", None, 40, "QA", "Cough", None, "/", None,
             36.9, "120/80", None, None, None],
        ],
    })
    return {"bp": bp, "checkup": checkup, "inpatient": inpatient}


@pytest.fixture()
def sample_config_yaml() -> str:
    return """imports:
  bp:
    workbook: ./data/BP.xlsx
  checkup:
    workbook: "./data/For check up.xlsx"
  inpatient:
    workbook: "./data/In patient.xlsx"
chunk_size: 500
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: clinic
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
