from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from clinic_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from clinic_import.db.batch_insert import DryRunSink, PostgresSink
from clinic_import.excel.reader import SheetNotFoundError, WorkbookReadError, read_sheet_grid
from clinic_import.logging.error_log import ErrorLogBuffer
from clinic_import.logging.init import enable_debug, log_summary, setup_logging
from clinic_import.models.config_models import DatabaseConfig, ImportJob, ImportKind
from clinic_import.models.processing_result import RunResult
from clinic_import.services.orchestrator import ProcessingError, run_imports, select_jobs
from clinic_import.services.progress import is_tty_enabled
from clinic_import.services.summary import render_summary_line
from clinic_import.transform.mappers import map_sheet

"""CLI entrypoint.

Operator-triggered batch job: load config, pick the imports to run
(positional ``bp`` / ``checkup`` / ``inpatient``, default all), run them in
order against PostgreSQL (or a dry-run sink) and print a SUMMARY line.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string; environment wins over the config file.

    1. DATABASE_URL / PGDSN, then ``database.dsn``
    2. otherwise PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE,
       each falling back to the matching ``database`` field
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(conn: Any) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    try:
        conn.autocommit = False  # PostgresSink commits per chunk
        yield conn
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over variables already in the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="clinic-import",
        description="Import legacy clinic workbooks (BP logs, check-up requests, in-patient visits)",
    )
    p.add_argument(
        "imports",
        nargs="*",
        default=[],
        metavar="{bp,checkup,inpatient}",
        help="imports to run (default: all configured, in order bp, checkup, inpatient)",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="path to import.yml")
    p.add_argument("--dry-run", action="store_true", help="map and chunk rows without touching the database")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect", action="store_true", help="Print resolved columns and sample rows then exit")
    args = p.parse_args(argv)
    known = {k.value for k in ImportKind}
    unknown = [v for v in args.imports if v not in known]
    if unknown:
        p.error(f"unknown import(s): {', '.join(unknown)} (choose from {', '.join(sorted(known))})")
    return args


def _inspect(jobs: list[ImportJob]) -> int:
    code = EXIT_SUCCESS_ALL
    for job in jobs:
        print(f"IMPORT: {job.kind.value} file={job.workbook} sheet={job.sheet_name!r} header_row={job.header_row}")
        try:
            grid = read_sheet_grid(job.workbook, job.sheet_name)
        except (WorkbookReadError, SheetNotFoundError) as e:
            print(f"  error={e}")
            code = EXIT_PARTIAL_FAILURE
            continue
        result = map_sheet(job.kind, grid, job.header_row)
        layout = result.layout
        print(f"  columns={list(layout.columns.labels)}")
        if layout.symptoms is not None:
            labels = [layout.columns.label(i) for i in layout.symptoms.indices()]
            print(f"  symptom_columns={labels}")
        print(f"  rows_read={result.rows_read} accepted={len(result.records)} dropped={len(result.rejected_rows)}")
        for record in result.records[:3]:
            print(f"    {record.to_dict()}")
    return code


def _exit_code(result: RunResult) -> int:
    if result.failed_imports > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up the test runner's argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        enable_debug()
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    kinds = [ImportKind(v) for v in args.imports] or None
    try:
        jobs = select_jobs(cfg, kinds)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.inspect:
        return _inspect(jobs)

    error_log = ErrorLogBuffer()
    show_progress = is_tty_enabled()
    if args.dry_run:
        logger.info("dry run: nothing will be written to the database")
        result = run_imports(jobs, DryRunSink(), error_log, show_progress=show_progress)
    else:
        try:
            conn = psycopg2.connect(resolve_dsn(cfg.database))
        except psycopg2.OperationalError as e:
            logger.error(f"database connection failed: {str(e).strip()}")
            return EXIT_FATAL
        with _db_connection(conn):
            result = run_imports(jobs, PostgresSink(conn), error_log, show_progress=show_progress)

    logger.info(f"mode={'dry-run' if args.dry_run else 'live'} total_rows={result.total_inserted_rows}")
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
