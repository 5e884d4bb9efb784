from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering for an import run."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY imports={n} success={s} failed={f} rows={inserted} dropped={d}
    elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2025, 3, 1, 8, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2025, 3, 1, 8, 0, 2, tzinfo=timezone.utc)
        >>> render_summary_line(RunResult(start_time=start, end_time=end))
        'SUMMARY imports=0 success=0 failed=0 rows=0 dropped=0 elapsed_sec=2 throughput_rps=0'
    """
    return (
        f"SUMMARY imports={len(result.imports)} "
        f"success={result.success_imports} "
        f"failed={result.failed_imports} "
        f"rows={result.total_inserted_rows} "
        f"dropped={result.total_dropped_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
