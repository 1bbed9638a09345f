from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Source-file progress bar for the read phase (tqdm, TTY only).

Outside a terminal (CI, redirected output) no bar is created; the tracker
still counts outcomes so callers can use it unconditionally.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]

# 結果ラベル: read / skipped / failed
OUTCOMES = ("read", "skipped", "failed")


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar over the source files of a build.

    Each file goes through ``start_file`` then ``finish_file`` with its
    outcome; the bar postfix shows the running outcome counts.
    """

    def __init__(self, total_files: int, *, description: str = "Reading tables") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.outcomes: Counter[str] = Counter()
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = (
            tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
            if self.enabled
            else None
        )

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, outcome: str = "read") -> None:
        if outcome not in OUTCOMES:
            raise ValueError(f"unknown outcome: {outcome}")
        self.outcomes[outcome] += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
