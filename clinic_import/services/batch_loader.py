from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import TypeVar

from ..db.batch_insert import BatchInsertError, InsertSink
from ..models.processing_result import BatchStatsAccumulator
from ..models.records import NormalizedRecord

"""Batch loader: ordered records -> fixed-size chunks -> sink, fail-fast.

Chunks are submitted strictly one after another; the next submission only
starts once the previous one has returned. The first failing chunk stops
the load: later chunks are never attempted and earlier chunks stay
committed (no compensating rollback).
"""

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "BatchMetrics",
    "LoadError",
    "LoadResult",
    "chunked",
    "load_records",
]

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500

T = TypeVar("T")


class LoadError(Exception):
    """A chunk was rejected by the sink; carries what was already committed."""

    def __init__(self, destination: str, message: str, committed_rows: int, failed_chunk: int) -> None:
        self.destination = destination
        self.message = message
        self.committed_rows = committed_rows
        self.failed_chunk = failed_chunk  # 0-based chunk index
        super().__init__(f"{destination} insert failed: {message}")


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single chunk submission."""
    chunk_index: int
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class LoadResult:
    destination: str
    inserted_rows: int
    chunks: int
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Contiguous slices of at most ``size`` items, in order."""
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def load_records(
    sink: InsertSink,
    destination: str,
    records: Sequence[NormalizedRecord],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_progress: Callable[[str, int], None] | None = None,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> LoadResult:
    """Submit ``records`` to ``sink`` in sequential chunks.

    on_progress: called after each committed chunk with (destination, rows
        inserted so far).
    metrics_callback: receives BatchMetrics for every submitted chunk,
        including the one that failed.

    Raises
    ------
    LoadError: on the first chunk failure; ``committed_rows`` counts the
        rows of the chunks submitted before it.
    ValueError: chunk_size < 1
    """
    chunks = list(chunked(records, chunk_size))
    stats = BatchStatsAccumulator()
    inserted = 0
    total = len(records)

    for index, chunk in enumerate(chunks):
        start_time = time.time()
        try:
            result = sink.insert(destination, chunk)
        except BatchInsertError as e:
            logger.error(
                "%s chunk %d/%d rejected after %d committed rows: %s",
                destination, index + 1, len(chunks), inserted, e,
            )
            raise LoadError(destination, str(e), committed_rows=inserted, failed_chunk=index) from e
        finally:
            end_time = time.time()
            elapsed = end_time - start_time
            stats.add_batch_time(elapsed)
            if metrics_callback is not None:
                metrics_callback(
                    BatchMetrics(
                        chunk_index=index,
                        batch_size=len(chunk),
                        elapsed_seconds=elapsed,
                        start_time=start_time,
                        end_time=end_time,
                    )
                )
        inserted += result.inserted_rows
        logger.info("Inserted %d into %s (%d/%d)", len(chunk), destination, inserted, total)
        if on_progress is not None:
            on_progress(destination, inserted)

    _, avg, p95 = stats.get_stats()
    return LoadResult(
        destination=destination,
        inserted_rows=inserted,
        chunks=len(chunks),
        avg_batch_seconds=avg,
        p95_batch_seconds=p95,
    )
