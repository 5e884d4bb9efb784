from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from ..db.batch_insert import InsertSink
from ..excel.reader import SheetNotFoundError, WorkbookReadError, read_sheet_grid
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig, ImportJob, ImportKind
from ..models.error_record import (
    DATABASE_INSERT_ERROR,
    SHEET_NOT_FOUND,
    WORKBOOK_READ_ERROR,
    ErrorRecord,
)
from ..models.processing_result import ImportStat, ImportStatus, RunResult
from ..transform.mappers import MappingResult, map_sheet
from .batch_loader import LoadError, LoadResult, load_records
from .progress import LoadProgress

"""Import orchestration.

One import = one workbook sheet -> one destination table:
read grid -> resolve header -> map rows (drop incomplete) -> load in chunks.
Selected imports run one after another and independently: a fatal error in
one (missing sheet, rejected chunk) is recorded and the next one still runs.
"""

__all__ = [
    "ALL_KINDS",
    "ImportOutcome",
    "ProcessingError",
    "import_sheet",
    "load_job",
    "map_job",
    "run_import",
    "run_imports",
    "select_jobs",
]

logger = logging.getLogger(__name__)

ALL_KINDS: tuple[ImportKind, ...] = (ImportKind.BP, ImportKind.CHECKUP, ImportKind.INPATIENT)


class ProcessingError(Exception):
    """Raised for run-level problems (e.g. an import that is not configured)."""


@dataclass(frozen=True)
class ImportOutcome:
    mapping: MappingResult
    load: LoadResult


def select_jobs(config: ImportConfig, kinds: Iterable[ImportKind] | None = None) -> list[ImportJob]:
    """Jobs for ``kinds`` (all configured when None) in bp, checkup, inpatient order."""
    if kinds is None:
        return [config.jobs[k] for k in ALL_KINDS if k in config.jobs]
    wanted = set(kinds)
    missing = sorted(k.value for k in wanted if k not in config.jobs)
    if missing:
        raise ProcessingError(f"import not configured: {', '.join(missing)}")
    return [config.jobs[k] for k in ALL_KINDS if k in wanted]


def map_job(job: ImportJob) -> MappingResult:
    """Read and map one sheet, logging the row counts.

    Raises
    ------
    WorkbookReadError / SheetNotFoundError: nothing was processed
    """
    grid = read_sheet_grid(job.workbook, job.sheet_name)
    mapping = map_sheet(job.kind, grid, job.header_row)

    layout = mapping.layout
    if job.kind is ImportKind.INPATIENT and layout.symptoms is None:
        logger.warning(
            "%s: symptom anchor columns not found, symptoms left empty", job.sheet_name
        )
    logger.info(
        "%s: %d rows read, %d accepted, %d dropped",
        job.sheet_name,
        mapping.rows_read,
        len(mapping.records),
        len(mapping.rejected_rows),
    )
    logger.debug("%s: dropped rows %s", job.sheet_name, mapping.rejected_rows)
    return mapping


def load_job(job: ImportJob, mapping: MappingResult, sink: InsertSink, show_progress: bool = True) -> LoadResult:
    """Load the accepted records of ``mapping``; raises LoadError on a rejected chunk."""
    if show_progress:
        with LoadProgress(job.table_name, len(mapping.records)) as progress:
            return load_records(
                sink, job.table_name, mapping.records, chunk_size=job.chunk_size, on_progress=progress
            )
    return load_records(sink, job.table_name, mapping.records, chunk_size=job.chunk_size)


def import_sheet(job: ImportJob, sink: InsertSink, show_progress: bool = True) -> ImportOutcome:
    """Run one import, raising on fatal errors.

    Raises
    ------
    WorkbookReadError / SheetNotFoundError: nothing was processed
    LoadError: a chunk failed; earlier chunks are committed
    """
    mapping = map_job(job)
    return ImportOutcome(mapping=mapping, load=load_job(job, mapping, sink, show_progress=show_progress))


def _failed(job: ImportJob, started: datetime, error: str, **counts: int) -> ImportStat:
    return ImportStat(
        kind=job.kind.value,
        table_name=job.table_name,
        status=ImportStatus.FAILED,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        error=error,
        **counts,
    )


def run_import(
    job: ImportJob,
    sink: InsertSink,
    error_log: ErrorLogBuffer | None = None,
    show_progress: bool = True,
) -> ImportStat:
    """Run one import and report it as an ImportStat instead of raising."""
    started = datetime.now(UTC)
    file_name = job.workbook.name
    logger.info("Importing %s [%s] -> %s", file_name, job.sheet_name, job.table_name)

    try:
        mapping = map_job(job)
    except (WorkbookReadError, SheetNotFoundError) as e:
        error_type = SHEET_NOT_FOUND if isinstance(e, SheetNotFoundError) else WORKBOOK_READ_ERROR
        logger.error("%s: %s", file_name, e)
        if error_log is not None:
            error_log.append(ErrorRecord.create(file_name, job.sheet_name, -1, error_type, str(e)))
        return _failed(job, started, str(e))

    counts = {
        "rows_read": mapping.rows_read,
        "accepted_rows": len(mapping.records),
        "dropped_rows": len(mapping.rejected_rows),
    }
    try:
        load = load_job(job, mapping, sink, show_progress=show_progress)
    except LoadError as e:
        logger.error("%s (%d rows committed before the failure)", e, e.committed_rows)
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(file_name, job.sheet_name, -1, DATABASE_INSERT_ERROR, str(e))
            )
        return _failed(job, started, str(e), inserted_rows=e.committed_rows, **counts)

    return ImportStat(
        kind=job.kind.value,
        table_name=job.table_name,
        status=ImportStatus.SUCCESS,
        inserted_rows=load.inserted_rows,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        total_batches=load.chunks,
        avg_batch_seconds=load.avg_batch_seconds,
        p95_batch_seconds=load.p95_batch_seconds,
        **counts,
    )


def run_imports(
    jobs: Iterable[ImportJob],
    sink: InsertSink,
    error_log: ErrorLogBuffer | None = None,
    show_progress: bool = True,
) -> RunResult:
    """Run ``jobs`` sequentially and aggregate the results.

    The error log (when given) is flushed once at the end.
    """
    start_time = datetime.now(UTC)
    stats = [run_import(job, sink, error_log, show_progress=show_progress) for job in jobs]
    if error_log is not None:
        path = error_log.flush()
        if path is not None:
            logger.warning("error details written to %s", path)
    return RunResult(start_time=start_time, end_time=datetime.now(UTC), imports=stats)
