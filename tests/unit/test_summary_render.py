from __future__ import annotations

from datetime import UTC, datetime

from clinic_import.models.processing_result import ImportStat, ImportStatus, RunResult
from clinic_import.services.summary import render_summary_line


def _stat(kind: str, status: ImportStatus, inserted: int, dropped: int = 0) -> ImportStat:
    return ImportStat(kind=kind, table_name=f"{kind}_t", status=status, inserted_rows=inserted, dropped_rows=dropped)


def test_render_summary_line_counts():
    start = datetime(2025, 3, 1, 8, 0, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 8, 0, 4, tzinfo=UTC)
    result = RunResult(
        start_time=start,
        end_time=end,
        imports=[
            _stat("bp", ImportStatus.SUCCESS, 1200, dropped=3),
            _stat("checkup", ImportStatus.FAILED, 500),
            _stat("inpatient", ImportStatus.SUCCESS, 300, dropped=1),
        ],
    )
    assert render_summary_line(result) == (
        "SUMMARY imports=3 success=2 failed=1 rows=2000 dropped=4 elapsed_sec=4 throughput_rps=500"
    )


def test_render_summary_fractional_values():
    start = datetime(2025, 3, 1, 8, 0, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 8, 0, 3, tzinfo=UTC)
    result = RunResult(start_time=start, end_time=end, imports=[_stat("bp", ImportStatus.SUCCESS, 10)])
    assert render_summary_line(result).endswith("elapsed_sec=3 throughput_rps=3.333")
