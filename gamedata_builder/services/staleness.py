from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from ..encoders import ENCODERS
from ..models.config_models import BuildConfig, MergeGroup
from ..output.writer import output_directory_for
from ..readers import ExcelTableReader, TableReadError
from ..readers.excel_reader import is_hidden_sheet, workbook_sheet_names

"""Fast-mode staleness check.

A source file is up to date when, for every enabled format and every table
the file ends up as, an artifact exists in that format's output directory
and is not older than the source. The table names come from the file's
structure only (CSV base name, visible workbook sheets), resolved through
the configured merge groups, so no cell data is read.
"""

__all__ = [
    "expected_artifacts",
    "needs_processing",
    "output_table_names",
    "plan_fast_build",
    "source_table_names",
]


def source_table_names(source: Path) -> list[str]:
    """Tables ``source`` produces when read; [] if a workbook can't be opened."""
    if source.suffix in ExcelTableReader.supported_extensions:
        try:
            sheets = workbook_sheet_names(source)
        except TableReadError:
            return []
        return [s for s in sheets if not is_hidden_sheet(s)]
    return [source.stem]


def resolve_merged_name(name: str, groups: Iterable[MergeGroup]) -> str:
    # グループは設定順に適用されるので連鎖もたどる
    for group in groups:
        if name in group.source_sheets:
            name = group.output_name
    return name


def output_table_names(source: Path, config: BuildConfig) -> list[str]:
    """Names of the artifacts ``source`` contributes to, in sheet order."""
    names: list[str] = []
    for table_name in source_table_names(source):
        name = resolve_merged_name(table_name, config.merge_groups)
        if name not in names:
            names.append(name)
    return names


def expected_artifacts(table_name: str, config: BuildConfig, fmt: str) -> list[Path]:
    """Candidate artifact paths for ``table_name`` in format ``fmt``."""
    encoder_cls = ENCODERS.get(fmt)
    if encoder_cls is None:
        return []
    directory = output_directory_for(config.output_directory, config, fmt)
    return [directory / f"{table_name}{suffix}" for suffix in encoder_cls.output_suffixes]


def _fresh(candidate: Path, source_mtime: float) -> bool:
    try:
        return candidate.stat().st_mtime >= source_mtime
    except OSError:
        return False


def needs_processing(
    source: Path, config: BuildConfig, table_names: Sequence[str] | None = None
) -> bool:
    """True when any expected artifact is missing or older than ``source``."""
    try:
        source_mtime = source.stat().st_mtime
    except OSError:
        return True
    if table_names is None:
        table_names = output_table_names(source, config)
    if not table_names:
        return True
    for fmt in config.enabled_formats:
        for name in table_names:
            if not any(_fresh(c, source_mtime) for c in expected_artifacts(name, config, fmt)):
                return True
    return False


def plan_fast_build(
    paths: Sequence[Path], config: BuildConfig
) -> tuple[set[Path], dict[Path, list[str]]]:
    """Decide which sources must be read in fast mode.

    A stale source pulls in every other source feeding the same output
    table, so a merge group is always rebuilt from all of its sources.

    Returns:
        (sources to read, output table names per source)
    """
    outputs = {p: output_table_names(p, config) for p in paths}
    stale = {p for p in paths if needs_processing(p, config, outputs[p])}
    while True:
        dirty = {name for p in stale for name in outputs[p]}
        extra = {p for p in paths if p not in stale and dirty.intersection(outputs[p])}
        if not extra:
            return stale, outputs
        stale |= extra
