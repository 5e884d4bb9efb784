from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar

"""Normalized record models for the clinic spreadsheet import.

One dataclass per destination table. Records are created fresh for a single
import run and never mutated afterwards (write-once once handed to the
batch loader).
"""

__all__ = [
    "BpLogRecord",
    "CheckupRecord",
    "InpatientVisitRecord",
    "NormalizedRecord",
    "CHECKUP_INITIAL_STATUS",
]

CHECKUP_INITIAL_STATUS = "open"


class _RecordMixin:
    """Shared helpers for record dataclasses (column order = field order)."""

    destination: ClassVar[str]
    required_fields: ClassVar[tuple[str, ...]]

    @classmethod
    def columns(cls) -> list[str]:
        return [f.name for f in fields(cls)]  # type: ignore[arg-type]

    def to_row(self) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.columns())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class BpLogRecord(_RecordMixin):
    """Row for ``bp_logs`` (BP Monitoring sheet)."""
    destination: ClassVar[str] = "bp_logs"
    required_fields: ClassVar[tuple[str, ...]] = ("log_date",)

    log_date: str  # ISO date
    log_time: str | None  # HH:MM:SS
    employee_name: str | None
    age: int | None  # 0-120
    designation: str | None
    bp_text: str | None
    intervention: str | None
    systolic: int | None = None  # derived from bp_text
    diastolic: int | None = None  # derived from bp_text


@dataclass(frozen=True)
class CheckupRecord(_RecordMixin):
    """Row for ``checkup_requests`` (For Check-up sheet)."""
    destination: ClassVar[str] = "checkup_requests"
    required_fields: ClassVar[tuple[str, ...]] = ("request_date", "employee_name")

    request_date: str
    employee_name: str
    symptoms: str | None
    remarks: str | None
    status: str = CHECKUP_INITIAL_STATUS


@dataclass(frozen=True)
class InpatientVisitRecord(_RecordMixin):
    """Row for ``inpatient_visits`` (In-Patient Record sheet)."""
    destination: ClassVar[str] = "inpatient_visits"
    required_fields: ClassVar[tuple[str, ...]] = ("visit_date", "name")

    visit_date: str
    visit_time: str | None
    name: str
    age: int | None
    department: str | None
    chief_complaint: str | None
    symptoms: str  # comma-joined marker headers, "" when none
    bp_text: str | None
    intervention: str | None
    disposition: str | None
    notes: str | None


NormalizedRecord = BpLogRecord | CheckupRecord | InpatientVisitRecord
