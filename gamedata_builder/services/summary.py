from __future__ import annotations

from ..models.processing_result import BuildResult

"""SUMMARY line rendering.

Format:
SUMMARY files={read}/{total} skipped={skipped} tables={tables} rows={rows}
artifacts={artifacts} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation; integral values drop the fraction."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: BuildResult) -> str:
    """Render the SUMMARY line for one build.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BuildResult(
        ...     total_files=3, read_files=2, skipped_files=1, total_tables=4,
        ...     total_rows=120, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, artifacts=12,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=2/3 skipped=1 tables=4 rows=120 artifacts=12 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.read_files}/{result.total_files} "
        f"skipped={result.skipped_files} "
        f"tables={result.total_tables} "
        f"rows={result.total_rows} "
        f"artifacts={result.artifacts} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
