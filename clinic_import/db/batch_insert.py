from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import psycopg2
from psycopg2.extras import execute_values

from ..models.records import NormalizedRecord

"""Insertion sinks.

A sink stores one chunk of records under a destination table name:
``insert(destination, records) -> InsertResult``; any failure surfaces as
BatchInsertError carrying the underlying message. Generated ids are never
read back.

PostgresSink issues one multi-row INSERT per chunk through
psycopg2.extras.execute_values and commits it, so every chunk is its own
unit of work. DryRunSink only counts.
"""

__all__ = [
    "BatchInsertError",
    "DryRunSink",
    "InsertResult",
    "InsertSink",
    "PostgresSink",
    "batch_insert",
]

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


class InsertSink(Protocol):
    def insert(self, destination: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        ...


def _quote_identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise BatchInsertError(f"invalid identifier: {name!r}")
    return f'"{name}"'


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
) -> InsertResult:
    """Perform a batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: destination table (plain identifier, optionally schema-qualified)
    columns: insert columns, in row order
    rows: row value sequences
    page_size: execute_values page size
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    table_sql = ".".join(_quote_identifier(part) for part in table.split("."))
    cols_sql = ",".join(_quote_identifier(c) for c in columns)
    base_sql = f"INSERT INTO {table_sql} ({cols_sql}) VALUES %s"

    try:
        execute_values(cursor, base_sql, rows_list, page_size=page_size)
    except psycopg2.Error as e:
        raise BatchInsertError(str(e).strip() or type(e).__name__) from e

    return InsertResult(inserted_rows=len(rows_list))


class PostgresSink:
    """Sink writing each chunk to PostgreSQL in its own transaction."""

    def __init__(self, connection: Any, page_size: int = 1000) -> None:
        self.connection = connection
        self.page_size = page_size

    def _rollback(self) -> None:
        # a dropped connection cannot roll back; the caller re-raises the chunk error
        try:
            self.connection.rollback()
        except psycopg2.Error as e:
            logger.debug("rollback failed: %s", str(e).strip() or type(e).__name__)

    def insert(self, destination: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        if not records:
            return InsertResult(inserted_rows=0)
        columns = records[0].columns()
        rows = [r.to_row() for r in records]
        try:
            cursor = self.connection.cursor()
        except psycopg2.Error as e:
            raise BatchInsertError(str(e).strip() or type(e).__name__) from e
        try:
            result = batch_insert(cursor, destination, columns, rows, page_size=self.page_size)
            self.connection.commit()
        except BatchInsertError:
            self._rollback()
            raise
        except psycopg2.Error as e:
            # commit failure
            self._rollback()
            raise BatchInsertError(str(e).strip() or type(e).__name__) from e
        finally:
            try:
                cursor.close()
            except psycopg2.Error as e:
                logger.debug("cursor close failed: %s", str(e).strip() or type(e).__name__)
        return result


class DryRunSink:
    """Sink that stores nothing; keeps (destination, size) of every chunk."""

    def __init__(self, on_insert: Callable[[str, Sequence[NormalizedRecord]], None] | None = None) -> None:
        self.chunks: list[tuple[str, int]] = []
        self.on_insert = on_insert

    def insert(self, destination: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        self.chunks.append((destination, len(records)))
        if self.on_insert is not None:
            self.on_insert(destination, records)
        logger.debug("dry-run insert table=%s rows=%d", destination, len(records))
        return InsertResult(inserted_rows=len(records))
