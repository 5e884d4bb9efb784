from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..models.cell import EMPTY_CELL, Cell, as_cell
from ..transform.sanitizers import clean_text

"""Header resolution by column name.

Legacy sheets were transcribed by hand, so column positions drift between
workbooks. Columns are located by their trimmed, case-folded header label;
a missing label resolves to NOT_FOUND (-1) instead of raising.
"""

__all__ = [
    "NOT_FOUND",
    "ColumnIndexMap",
    "SymptomColumnRange",
    "normalize_label",
    "resolve_columns",
    "symptom_range",
]

NOT_FOUND = -1


def normalize_label(value: Any) -> str:
    """Trimmed, case-folded form of a header label ("" for blank cells)."""
    text = clean_text(value)
    return text.casefold() if text is not None else ""


@dataclass(frozen=True)
class ColumnIndexMap:
    """Immutable name -> column index lookup built once per sheet."""
    labels: tuple[str, ...]  # trimmed header labels, original case
    _positions: Mapping[str, int] = field(repr=False, compare=False)

    @classmethod
    def from_header(cls, header_row: Sequence[Any]) -> ColumnIndexMap:
        labels: list[str] = []
        positions: dict[str, int] = {}
        for i, raw in enumerate(header_row):
            label = clean_text(raw) or ""
            labels.append(label)
            key = label.casefold()
            if key and key not in positions:  # first occurrence wins
                positions[key] = i
        return cls(labels=tuple(labels), _positions=MappingProxyType(positions))

    def index(self, name: str) -> int:
        return self._positions.get(normalize_label(name), NOT_FOUND)

    def find(self, *names: str) -> int:
        """Index of the first of ``names`` present in the header."""
        for name in names:
            i = self.index(name)
            if i != NOT_FOUND:
                return i
        return NOT_FOUND

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.index(name) != NOT_FOUND

    def label(self, index: int) -> str:
        if 0 <= index < len(self.labels):
            return self.labels[index]
        return ""

    @staticmethod
    def cell_at(row: Sequence[Any], index: int) -> Cell:
        """Cell at ``index`` or EMPTY when the column is absent or the row is short."""
        if index < 0 or index >= len(row):
            return EMPTY_CELL
        return as_cell(row[index])

    def cell(self, row: Sequence[Any], name: str) -> Cell:
        return self.cell_at(row, self.index(name))


def resolve_columns(header_row: Sequence[Any], targets: Iterable[str]) -> dict[str, int]:
    """Resolve each target name to its column index (NOT_FOUND when absent)."""
    column_map = ColumnIndexMap.from_header(header_row)
    return {name: column_map.index(name) for name in targets}


@dataclass(frozen=True)
class SymptomColumnRange:
    """Columns strictly between two anchor columns (``start``..``end`` inclusive)."""
    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    def indices(self) -> range:
        return range(self.start, self.end + 1)

    def __len__(self) -> int:
        return len(self.indices())


def symptom_range(
    column_map: ColumnIndexMap,
    start_anchor: str | Sequence[str],
    end_anchor: str | Sequence[str],
) -> SymptomColumnRange | None:
    """Derive the marker span between two anchor columns.

    Each anchor may be a single name or a sequence of aliases. Returns None
    when either anchor is missing. When the end anchor does not come after
    the start anchor the range is empty.
    """
    starts = (start_anchor,) if isinstance(start_anchor, str) else tuple(start_anchor)
    ends = (end_anchor,) if isinstance(end_anchor, str) else tuple(end_anchor)
    start_i = column_map.find(*starts)
    end_i = column_map.find(*ends)
    if start_i == NOT_FOUND or end_i == NOT_FOUND:
        return None
    if end_i <= start_i:
        return SymptomColumnRange(start=start_i + 1, end=start_i)
    return SymptomColumnRange(start=start_i + 1, end=end_i - 1)
