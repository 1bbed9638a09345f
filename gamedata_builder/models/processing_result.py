from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

"""Build result models for the game data builder.

BuildResult aggregates the metrics of one run and feeds the SUMMARY line;
FileStat keeps the per-source-file detail.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-source-file statistics."""
    file_name: str
    status: str  # read / skipped
    tables: int = 0
    rows: int = 0
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class BuildResult:
    """Aggregated results of one build run."""
    total_files: int  # 対象拡張子のソースファイル数
    read_files: int
    skipped_files: int  # fast mode で最新と判定されたファイル
    total_tables: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    artifacts: int = 0
    written_paths: list[Path] = field(default_factory=list)
    file_stats: list[FileStat] = field(default_factory=list)
