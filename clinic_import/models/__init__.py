"""Domain models for the clinic workbook import.

Tagged worksheet cells, the normalized record types, import job
configuration and run results.
"""

from .cell import Cell, CellKind, to_cell
from .config_models import DatabaseConfig, ImportConfig, ImportJob, ImportKind
from .records import BpLogRecord, CheckupRecord, InpatientVisitRecord, NormalizedRecord

__all__ = [
    # Cells
    "Cell",
    "CellKind",
    "to_cell",
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "ImportJob",
    "ImportKind",
    # Records
    "BpLogRecord",
    "CheckupRecord",
    "InpatientVisitRecord",
    "NormalizedRecord",
]
