from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

"""Config dataclasses for the clinic workbook import.

These are the typed form of config/import.yml after loading and defaulting
(see clinic_import.config.loader).
"""

DEFAULT_CHUNK_SIZE = 500


class ImportKind(Enum):
    """The three legacy workbooks the job knows how to import."""
    BP = "bp"
    CHECKUP = "checkup"
    INPATIENT = "inpatient"


@dataclass(frozen=True)
class SheetDefaults:
    sheet_name: str
    header_row: int  # 0-based row index of the real header
    table_name: str


# Sheet layout of the legacy workbooks. The in-patient sheet carries two
# banner rows above its header.
SHEET_DEFAULTS: dict[ImportKind, SheetDefaults] = {
    ImportKind.BP: SheetDefaults("BP Monitoring", 0, "bp_logs"),
    ImportKind.CHECKUP: SheetDefaults("For Check-up", 0, "checkup_requests"),
    ImportKind.INPATIENT: SheetDefaults("In-Patient Record", 2, "inpatient_visits"),
}


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportJob:
    """One per-sheet import operation: workbook sheet -> destination table."""
    kind: ImportKind
    workbook: Path
    sheet_name: str
    header_row: int
    table_name: str
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def with_defaults(cls, kind: ImportKind, workbook: Path, **overrides: object) -> ImportJob:
        """Build a job from SHEET_DEFAULTS, replacing any non-None override."""
        d = SHEET_DEFAULTS[kind]
        values: dict[str, object] = {
            "sheet_name": d.sheet_name,
            "header_row": d.header_row,
            "table_name": d.table_name,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(kind=kind, workbook=Path(workbook), **values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    jobs: dict[ImportKind, ImportJob]  # configured imports keyed by kind
    chunk_size: int = DEFAULT_CHUNK_SIZE
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
