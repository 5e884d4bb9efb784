from __future__ import annotations

import time

import pytest

from clinic_import.db.batch_insert import DryRunSink
from clinic_import.models.config_models import ImportKind
from clinic_import.services.batch_loader import load_records
from clinic_import.transform.mappers import build_layout, partition_rows

"""Mapping + chunking throughput without I/O."""

pytestmark = pytest.mark.perf

HEADER = ["Date", "Time", "Name", "Age", "Department", "Chief Complaint",
          "Fever", "Cough", "Temp", "BP", "Intervention", "Evaluation", "Medication"]


def test_map_and_load_20k_rows_quickly():
    rows = [
        [45717 + (i % 30), 0.375, f"Employee {i}", 30 + i % 40, "QA", "Dizzy",
         "/" if i % 2 else None, None, 37.2, "120/80", None, "Back to work", None]
        for i in range(20_000)
    ]
    layout = build_layout(ImportKind.INPATIENT, HEADER)
    start = time.perf_counter()
    result = partition_rows(ImportKind.INPATIENT, rows, layout)
    sink = DryRunSink()
    load = load_records(sink, "inpatient_visits", result.records)
    elapsed = time.perf_counter() - start
    assert load.inserted_rows == 20_000
    assert load.chunks == 40
    assert elapsed < 30
