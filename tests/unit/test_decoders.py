from __future__ import annotations

from datetime import date, datetime, time, timezone

import pandas as pd
import pytest

from clinic_import.models.cell import Cell, CellKind
from clinic_import.transform.decoders import (
    decode_date,
    decode_time,
    excel_serial_to_date,
    fraction_to_clock,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2025, 3, 1), "2025-03-01"),
        (datetime(2025, 3, 1, 23, 59, 59), "2025-03-01"),
        (pd.Timestamp("2025-03-01 08:30"), "2025-03-01"),
        ("2025-03-01", "2025-03-01"),
        ("  2025-03-01 ", "2025-03-01"),
        ("03/01/2025", "2025-03-01"),
        (45717, "2025-03-01"),
        (45717.75, "2025-03-01"),
        ("45717", "2025-03-01"),
    ],
)
def test_decode_date_accepted_representations(value, expected):
    assert decode_date(value) == expected


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", float("nan"), "not a date", "fever", 0, -5, 3_000_000, True, time(9, 30), "9:30"],
)
def test_decode_date_rejects_invalid(value):
    assert decode_date(value) is None


def test_decode_date_ignores_timezone_offset():
    aware = datetime(2025, 3, 1, 0, 30, tzinfo=timezone.utc)
    assert decode_date(aware) == "2025-03-01"
    assert decode_date("2025-03-01T07:30:00+08:00") == "2025-03-01"


@pytest.mark.parametrize(
    "value",
    [date(2024, 2, 29), "2025-03-01", "03/01/2025", 45717, pd.Timestamp("2025-12-31 23:00")],
)
def test_decode_date_is_idempotent(value):
    first = decode_date(value)
    assert first is not None
    assert decode_date(first) == first


def test_decode_date_accepts_prebuilt_cell():
    assert decode_date(Cell(CellKind.DATE, date(2025, 1, 2))) == "2025-01-02"
    assert decode_date(Cell(CellKind.EMPTY)) is None


def test_excel_serial_to_date_bounds():
    assert excel_serial_to_date(1) == date(1899, 12, 31)
    assert excel_serial_to_date(2958465) == date(9999, 12, 31)
    assert excel_serial_to_date(0.9) is None
    assert excel_serial_to_date(2958466) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.5, "12:00:00"),
        (0.25, "06:00:00"),
        (0.0001, "00:00:09"),
        ("0.5", "12:00:00"),
        ("9:05", "09:05:00"),
        ("09:05", "09:05:00"),
        ("23:59:59", "23:59:59"),
        ("7:05:30", "07:05:30"),
        (time(14, 5, 9), "14:05:09"),
        (datetime(2025, 3, 1, 16, 45, 0), "16:45:00"),
    ],
)
def test_decode_time_accepted_representations(value, expected):
    assert decode_time(value) == expected


@pytest.mark.parametrize(
    "value",
    [None, "", 0, 1, 1.5, 7, -0.5, "9", "9:5", "24:00", "12:60", "noon", True, date(2025, 3, 1)],
)
def test_decode_time_rejects_invalid(value):
    assert decode_time(value) is None


def test_fraction_to_clock_rounds_half_up_and_clamps():
    # 12:00:00.6 rounds to the next second
    assert fraction_to_clock(0.5 + 0.6 / 86400) == "12:00:01"
    assert fraction_to_clock(0.999999) == "23:59:59"
    assert fraction_to_clock(1.0) is None
    assert fraction_to_clock(0.0) is None
