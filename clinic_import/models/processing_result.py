from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Result models for an import run.

ImportStat describes one per-sheet import, RunResult aggregates a whole
invocation for the SUMMARY line. BatchStatsAccumulator collects per-chunk
timings reported by the batch loader.
"""


class ImportStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportStat:
    """Per-sheet import statistics."""
    kind: str
    table_name: str
    status: ImportStatus
    rows_read: int = 0  # non-empty data rows seen
    accepted_rows: int = 0  # rows that produced a record
    dropped_rows: int = 0  # rows rejected for missing required fields
    inserted_rows: int = 0  # rows committed by the sink
    elapsed_seconds: float = 0.0
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one invocation."""
    start_time: datetime
    end_time: datetime
    imports: list[ImportStat] = field(default_factory=list)

    @property
    def success_imports(self) -> int:
        return sum(1 for s in self.imports if s.status is ImportStatus.SUCCESS)

    @property
    def failed_imports(self) -> int:
        return sum(1 for s in self.imports if s.status is ImportStatus.FAILED)

    @property
    def total_inserted_rows(self) -> int:
        return sum(s.inserted_rows for s in self.imports)

    @property
    def total_dropped_rows(self) -> int:
        return sum(s.dropped_rows for s in self.imports)

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def throughput_rows_per_sec(self) -> float:
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return 0.0
        return self.total_inserted_rows / elapsed


class BatchStatsAccumulator:
    """Collects per-chunk timings and summarises them."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return (total_batches, avg_batch_seconds, p95_batch_seconds)."""
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 19th of 20 inclusive quantiles
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
