from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""JSON Lines error log for validation failures.

One file per run, ``<log_directory>/errors-YYYYMMDD-HHMMSS.log`` (UTC
timestamp fixed when the first record is written). Each line is one
ErrorRecord with exactly the keys sheet / row / column / message.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "log_file_name",
]

DEFAULT_LOG_DIRECTORY = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def log_file_name(when: datetime) -> str:
    return f"errors-{when.strftime(TIMESTAMP_FMT)}.log"


class ErrorLogBuffer:
    """Collects ErrorRecords in memory; ``flush`` appends them to the run's file."""

    def __init__(self, directory: Path = DEFAULT_LOG_DIRECTORY) -> None:
        self.directory = directory
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._target is None:
            self._target = self.directory / log_file_name(datetime.now(UTC))
        return self._target

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Write pending records; returns the file, or None if nothing was pending.

        Raises:
            OSError: directory or file cannot be written
        """
        if not self._pending:
            return None
        target = self.file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = "".join(f"{record.to_json_line()}\n" for record in self._pending)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(payload)
        self._pending = []
        return target
