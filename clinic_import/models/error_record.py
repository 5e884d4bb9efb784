from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Only fatal, import-level failures are recorded (missing sheet, unreadable
workbook, rejected chunk). Rows dropped for missing required fields are
counted, not logged. ``row`` is -1 for sheet-level errors.
"""

__all__ = [
    "ErrorRecord",
    "SHEET_NOT_FOUND",
    "WORKBOOK_READ_ERROR",
    "DATABASE_INSERT_ERROR",
]

SHEET_NOT_FOUND = "SHEET_NOT_FOUND"
WORKBOOK_READ_ERROR = "WORKBOOK_READ_ERROR"
DATABASE_INSERT_ERROR = "DATABASE_INSERT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook filename being imported
        sheet: sheet name within the workbook
        row: worksheet row number (1-based), -1 when not row specific
        error_type: error classification in UPPER_SNAKE_CASE format
        message: underlying error message
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
