#!/usr/bin/env python3
"""Sample workbook generator for dry runs and volume checks.

Writes three synthetic workbooks shaped like the legacy clinic sheets:
- BP.xlsx            sheet "BP Monitoring",     header on row 1
- For check up.xlsx  sheet "For Check-up",      header on row 1
- In patient.xlsx    sheet "In-Patient Record", two banner rows, header on row 3

Cells are deliberately mixed the way hand transcription leaves them: native
dates next to date strings and serial numbers, times as day fractions or
"H:MM" text, ages with stray fractions, and a share of incomplete rows that
the import is expected to drop.
"""
from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

NAMES = [
    "Juan Dela Cruz", "Maria Santos", "Jose Rizal", "Ana Reyes", "Pedro Penduko",
    "Liza Soberano", "Mark Bautista", "Grace Lim", "Ramon Cruz", "Nina Garcia",
]
DESIGNATIONS = ["Operator", "Clerk", "Supervisor", "Technician", "Driver"]
DEPARTMENTS = ["Production", "Admin", "Warehouse", "Maintenance", "QA"]
SYMPTOMS = ["Fever", "Cough", "Headache", "Dizziness", "Body Pain", "Nausea"]
EXCEL_EPOCH = datetime(1899, 12, 30)

BP_HEADER = ["Date", "Time", "Name", "Age", "Designation", "BP", "Intervention"]
CHECKUP_HEADER = ["Date", "Employee Name", "Symptoms", "Remarks"]
INPATIENT_HEADER = (
    ["Date", "Time", "Name", "Age", "Department", "Chief Complaint"]
    + SYMPTOMS
    + ["Temp", "BP", "Intervention", "Evaluation", "Medication"]
)


def _messy_date(rng: np.random.Generator, day: datetime) -> Any:
    """A date in one of the representations found in the legacy sheets."""
    style = rng.integers(0, 4)
    if style == 0:
        return day
    if style == 1:
        return day.strftime("%Y-%m-%d")
    if style == 2:
        return float((day - EXCEL_EPOCH).days)
    return day.strftime("%m/%d/%Y")


def _messy_time(rng: np.random.Generator) -> Any:
    seconds = int(rng.integers(7 * 3600, 18 * 3600))
    style = rng.integers(0, 3)
    if style == 0:
        return round(seconds / 86400, 6)
    if style == 1:
        return f"{seconds // 3600}:{(seconds % 3600) // 60:02d}"
    return None


def _bp_reading(rng: np.random.Generator) -> str:
    return f"{int(rng.integers(100, 170))}/{int(rng.integers(60, 110))}"


def _maybe_drop(rng: np.random.Generator, value: Any, drop_rate: float) -> Any:
    return None if rng.random() < drop_rate else value


def generate_rows(kind: str, rows: int, seed: int = 42, drop_rate: float = 0.05) -> list[list[Any]]:
    """Data rows (no header) for ``kind`` in bp / checkup / inpatient."""
    rng = np.random.default_rng(seed)
    start = datetime(2024, 1, 1)
    data: list[list[Any]] = []
    for i in range(rows):
        day = start + timedelta(days=int(rng.integers(0, 365)))
        name = str(rng.choice(NAMES))
        age: Any = int(rng.integers(19, 65))
        if rng.random() < 0.02:
            age = 0.375  # time fraction typed into the age column
        if kind == "bp":
            data.append([
                _maybe_drop(rng, _messy_date(rng, day), drop_rate),
                _messy_time(rng),
                name,
                age,
                str(rng.choice(DESIGNATIONS)),
                _bp_reading(rng),
                "Rest" if rng.random() < 0.3 else None,
            ])
        elif kind == "checkup":
            data.append([
                _messy_date(rng, day),
                _maybe_drop(rng, name, drop_rate),
                str(rng.choice(SYMPTOMS)).lower(),
                "rest advised" if rng.random() < 0.5 else None,
            ])
        elif kind == "inpatient":
            marks = ["/" if rng.random() < 0.3 else None for _ in SYMPTOMS]
            data.append(
                [
                    _messy_date(rng, day),
                    _messy_time(rng),
                    _maybe_drop(rng, name, drop_rate),
                    age,
                    str(rng.choice(DEPARTMENTS)),
                    "Not feeling well",
                ]
                + marks
                + [
                    round(float(rng.uniform(36.0, 39.5)), 1),
                    _bp_reading(rng),
                    "Paracetamol given",
                    "Back to work" if rng.random() < 0.7 else "Sent home",
                    "Paracetamol 500mg" if rng.random() < 0.5 else None,
                ]
            )
        else:
            raise ValueError(f"unknown kind: {kind}")
    return data


def write_workbook(path: Path, sheet_name: str, grid: list[list[Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


def create_workbooks(output_dir: Path, rows: int, seed: int = 42, drop_rate: float = 0.05) -> dict[str, Path]:
    """Write the three sample workbooks; returns kind -> path."""
    banner = ["IN-PATIENT RECORD"] + [None] * (len(INPATIENT_HEADER) - 1)
    period = ["January - December 2024"] + [None] * (len(INPATIENT_HEADER) - 1)
    return {
        "bp": write_workbook(
            output_dir / "BP.xlsx",
            "BP Monitoring",
            [BP_HEADER] + generate_rows("bp", rows, seed, drop_rate),
        ),
        "checkup": write_workbook(
            output_dir / "For check up.xlsx",
            "For Check-up",
            [CHECKUP_HEADER] + generate_rows("checkup", rows, seed + 1, drop_rate),
        ),
        "inpatient": write_workbook(
            output_dir / "In patient.xlsx",
            "In-Patient Record",
            [banner, period, INPATIENT_HEADER] + generate_rows("inpatient", rows, seed + 2, drop_rate),
        ),
    }


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic legacy clinic workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 1,200 rows per workbook into ./data
  %(prog)s data --rows 1200

  # reproducible set without incomplete rows
  %(prog)s data --rows 500 --seed 7 --drop-rate 0
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory for the generated workbooks")
    parser.add_argument("--rows", type=int, default=1200, help="Data rows per workbook (default: 1200)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--drop-rate",
        type=float,
        default=0.05,
        help="Share of rows missing a required field (default: 0.05)",
    )
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.drop_rate <= 1:
        print("Error: --drop-rate must be between 0 and 1", file=sys.stderr)
        return 1

    paths = create_workbooks(args.output_dir, args.rows, args.seed, args.drop_rate)
    for kind, path in paths.items():
        print(f"Created {kind} workbook: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
