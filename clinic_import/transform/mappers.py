from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..excel.headers import ColumnIndexMap, SymptomColumnRange, symptom_range
from ..models.cell import as_cell
from ..models.config_models import ImportKind
from ..models.records import (
    CHECKUP_INITIAL_STATUS,
    BpLogRecord,
    CheckupRecord,
    InpatientVisitRecord,
    NormalizedRecord,
)
from .bp_parser import parse_bp
from .decoders import decode_date, decode_time
from .sanitizers import bounded_int, clean_text, is_marked

"""Record mappers: raw data row + resolved columns -> normalized record.

Each import kind has a builder that turns one row into field values. The
required-field check is a separate partition step (``partition_rows``) so
the drop policy is explicit: rows missing a required value are counted as
rejected and never reach the batch loader.
"""

__all__ = [
    "CHIEF_COMPLAINT_ANCHOR",
    "TEMPERATURE_ANCHOR",
    "MappingResult",
    "RecordMapper",
    "SheetLayout",
    "MAPPERS",
    "aggregate_symptoms",
    "build_layout",
    "map_row",
    "map_sheet",
    "partition_rows",
]

# Symptom marker columns sit between these two anchors on the in-patient sheet
CHIEF_COMPLAINT_ANCHOR = ("chief complaint",)
TEMPERATURE_ANCHOR = ("temp", "temperature")


@dataclass(frozen=True)
class SheetLayout:
    """Everything resolved once per sheet from its header row."""
    columns: ColumnIndexMap
    symptoms: SymptomColumnRange | None = None


@dataclass(frozen=True)
class RecordMapper:
    kind: ImportKind
    record_type: type
    build: Callable[[Sequence[Any], SheetLayout], dict[str, Any]]
    uses_symptom_range: bool = False

    def is_complete(self, values: dict[str, Any]) -> bool:
        return all(values.get(f) is not None for f in self.record_type.required_fields)


@dataclass(frozen=True)
class MappingResult:
    """Accepted records plus the worksheet rows that were dropped."""
    layout: SheetLayout
    records: list[NormalizedRecord] = field(default_factory=list)
    rejected_rows: list[int] = field(default_factory=list)  # 1-based sheet rows

    @property
    def rows_read(self) -> int:
        return len(self.records) + len(self.rejected_rows)


def aggregate_symptoms(row: Sequence[Any], layout: SheetLayout) -> str:
    """Comma-joined header labels of the marked symptom columns."""
    if layout.symptoms is None:
        return ""
    found: list[str] = []
    for i in layout.symptoms.indices():
        label = layout.columns.label(i)
        if label and is_marked(ColumnIndexMap.cell_at(row, i)):
            found.append(label)
    return ", ".join(found)


def _build_bp(row: Sequence[Any], layout: SheetLayout) -> dict[str, Any]:
    col = layout.columns
    bp_text = clean_text(col.cell(row, "bp"))
    systolic, diastolic = parse_bp(bp_text)
    return {
        "log_date": decode_date(col.cell(row, "date")),
        "log_time": decode_time(col.cell(row, "time")),
        "employee_name": clean_text(col.cell(row, "name")),
        "age": bounded_int(col.cell(row, "age")),
        "designation": clean_text(col.cell(row, "designation")),
        "bp_text": bp_text,
        "intervention": clean_text(col.cell(row, "intervention")),
        "systolic": systolic,
        "diastolic": diastolic,
    }


def _build_checkup(row: Sequence[Any], layout: SheetLayout) -> dict[str, Any]:
    col = layout.columns
    return {
        "request_date": decode_date(col.cell(row, "date")),
        "employee_name": clean_text(col.cell(row, "employee name")),
        "symptoms": clean_text(col.cell(row, "symptoms")),
        "remarks": clean_text(col.cell(row, "remarks")),
        "status": CHECKUP_INITIAL_STATUS,
    }


def _build_inpatient(row: Sequence[Any], layout: SheetLayout) -> dict[str, Any]:
    col = layout.columns
    return {
        "visit_date": decode_date(col.cell(row, "date")),
        "visit_time": decode_time(col.cell(row, "time")),
        "name": clean_text(col.cell(row, "name")),
        "age": bounded_int(col.cell(row, "age")),
        "department": clean_text(col.cell(row, "department")),
        "chief_complaint": clean_text(
            ColumnIndexMap.cell_at(row, col.find(*CHIEF_COMPLAINT_ANCHOR))
        ),
        "symptoms": aggregate_symptoms(row, layout),
        "bp_text": clean_text(col.cell(row, "bp")),
        "intervention": clean_text(col.cell(row, "intervention")),
        "disposition": clean_text(col.cell(row, "evaluation")),
        "notes": clean_text(col.cell(row, "medication")),
    }


MAPPERS: dict[ImportKind, RecordMapper] = {
    ImportKind.BP: RecordMapper(ImportKind.BP, BpLogRecord, _build_bp),
    ImportKind.CHECKUP: RecordMapper(ImportKind.CHECKUP, CheckupRecord, _build_checkup),
    ImportKind.INPATIENT: RecordMapper(
        ImportKind.INPATIENT, InpatientVisitRecord, _build_inpatient, uses_symptom_range=True
    ),
}


def build_layout(kind: ImportKind, header_row: Sequence[Any]) -> SheetLayout:
    columns = ColumnIndexMap.from_header(header_row)
    symptoms = None
    if MAPPERS[kind].uses_symptom_range:
        symptoms = symptom_range(columns, CHIEF_COMPLAINT_ANCHOR, TEMPERATURE_ANCHOR)
    return SheetLayout(columns=columns, symptoms=symptoms)


def map_row(kind: ImportKind, row: Sequence[Any], layout: SheetLayout) -> NormalizedRecord | None:
    """Normalized record for one row, or None when a required field is missing."""
    mapper = MAPPERS[kind]
    values = mapper.build(row, layout)
    if not mapper.is_complete(values):
        return None
    return mapper.record_type(**values)


def _is_blank(row: Sequence[Any]) -> bool:
    return all(as_cell(c).is_empty for c in row)


def partition_rows(
    kind: ImportKind,
    rows: Sequence[Sequence[Any]],
    layout: SheetLayout,
    first_row_number: int = 1,
) -> MappingResult:
    """Split data rows into accepted records and rejected row numbers.

    ``first_row_number`` is the 1-based sheet row of ``rows[0]``. Entirely
    blank rows are skipped without being counted as rejected.
    """
    records: list[NormalizedRecord] = []
    rejected: list[int] = []
    for offset, row in enumerate(rows):
        if _is_blank(row):
            continue
        record = map_row(kind, row, layout)
        if record is None:
            rejected.append(first_row_number + offset)
        else:
            records.append(record)
    return MappingResult(layout=layout, records=records, rejected_rows=rejected)


def map_sheet(kind: ImportKind, grid: Sequence[Sequence[Any]], header_row: int) -> MappingResult:
    """Resolve the header at ``header_row`` and map every row below it."""
    header = grid[header_row] if 0 <= header_row < len(grid) else ()
    layout = build_layout(kind, header)
    data_rows = grid[header_row + 1:]
    # sheet row numbers are 1-based: header at index h is row h+1
    return partition_rows(kind, data_rows, layout, first_row_number=header_row + 2)
