from __future__ import annotations

import re

"""Blood-pressure text parsing ("120/80", "130 / 90 mmHg")."""

_BP_RE = re.compile(r"(\d{2,3})\s*/\s*(\d{2,3})")


def parse_bp(text: str | None) -> tuple[int | None, int | None]:
    """Return (systolic, diastolic) from the first reading found in ``text``."""
    if not text:
        return (None, None)
    m = _BP_RE.search(text)
    if not m:
        return (None, None)
    return (int(m.group(1)), int(m.group(2)))
