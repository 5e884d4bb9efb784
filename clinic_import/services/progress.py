from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

One bar per table load, advanced by the batch loader's progress callback.
In non-TTY environments (CI, redirected output) no bar is created so logs
are not interleaved with control sequences.
"""

__all__ = [
    "LoadProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class LoadProgress:
    """Row progress for loading one destination table."""

    def __init__(self, destination: str, total_rows: int) -> None:
        self.destination = destination
        self.total_rows = total_rows
        self.inserted = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=f"Loading {destination}",
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, destination: str, inserted_so_far: int) -> None:
        """Batch loader progress callback."""
        delta = inserted_so_far - self.inserted
        self.inserted = inserted_so_far
        if self.pbar is not None and delta > 0:
            self.pbar.update(delta)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> LoadProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
