from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from gamedata_builder.models.processing_result import BuildResult
from gamedata_builder.services.summary import format_seconds, render_summary_line

SUMMARY_RE = re.compile(
    r"^SUMMARY files=\d+/\d+ skipped=\d+ tables=\d+ rows=\d+ artifacts=\d+ elapsed_sec=[0-9.]+$"
)


def _result(elapsed: float, **kwargs) -> BuildResult:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    defaults = dict(
        total_files=3,
        read_files=2,
        skipped_files=1,
        total_tables=4,
        total_rows=120,
        start_time=now,
        end_time=now,
        elapsed_seconds=elapsed,
        artifacts=12,
    )
    defaults.update(kwargs)
    return BuildResult(**defaults)


def test_render_summary_line():
    line = render_summary_line(_result(2.0))
    assert line == "SUMMARY files=2/3 skipped=1 tables=4 rows=120 artifacts=12 elapsed_sec=2"
    assert SUMMARY_RE.match(line)


def test_render_empty_build():
    line = render_summary_line(
        _result(0.0, total_files=0, read_files=0, skipped_files=0, total_tables=0, total_rows=0, artifacts=0)
    )
    assert line == "SUMMARY files=0/0 skipped=0 tables=0 rows=0 artifacts=0 elapsed_sec=0"


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (3.0, "3"), (1.25, "1.25"), (1.23456, "1.235"), (0.000123, "0.000123"), (0.0000001, "0")],
)
def test_format_seconds(value: float, expected: str):
    assert format_seconds(value) == expected
    assert "e" not in format_seconds(value)
