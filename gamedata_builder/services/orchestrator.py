from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..encoders import Encoder
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import BuildConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import BuildResult, FileStat
from ..models.table import Table
from ..output.writer import ArtifactWriteError, sync_artifacts, write_artifacts
from ..readers import SUPPORTED_EXTENSIONS, TableReadError, reader_for
from .encode_phase import EncodePhaseError, encode_tables
from .progress import ProgressTracker
from .staleness import output_table_names, plan_fast_build
from .transformer import DuplicateTableError, transform
from .validator import validate_all

"""Build orchestration: read -> transform -> validate -> encode -> write.

Phases run strictly in this order. Reading is sequential, one file at a
time in sorted directory-walk order. Validation errors are collected for
the whole table set, logged and flushed to the error log before the run is
aborted. Every other failure is fatal immediately and surfaces as a
ProcessingError with the original exception chained.
"""

__all__ = [
    "ProcessingError",
    "ValidationFailedError",
    "process_all",
    "read_sources",
    "scan_source_files",
]

logger = logging.getLogger(__name__)

# Excel が開いている間に作るロックファイル (~$items.xlsx)
_LOCK_FILE_PREFIX = "~$"


class ProcessingError(Exception):
    """Base exception for fatal build errors."""
    pass


class ValidationFailedError(ProcessingError):
    """Raised after validation when at least one ErrorRecord was produced."""

    def __init__(self, errors: Sequence[ErrorRecord], log_path: Path | None = None) -> None:
        self.errors = list(errors)
        self.log_path = log_path
        super().__init__(f"validation failed with {len(self.errors)} errors")


def scan_source_files(directory: Path) -> list[Path]:
    """Walk ``directory`` recursively for supported table files.

    Args:
        directory: Directory to scan

    Returns:
        Sorted list of paths with a supported extension

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            p
            for p in directory.rglob("*")
            if p.is_file()
            and p.suffix in SUPPORTED_EXTENSIONS
            and not p.name.startswith(_LOCK_FILE_PREFIX)
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def read_sources(
    paths: Sequence[Path], config: BuildConfig
) -> tuple[list[Table], list[FileStat], list[Path]]:
    """Read every source that needs processing.

    Returns:
        (tables in read order, per-file stats, files skipped by fast mode)

    Raises:
        ProcessingError: first unreadable file aborts the run
    """
    tables: list[Table] = []
    file_stats: list[FileStat] = []
    skipped: list[Path] = []
    to_read = plan_fast_build(paths, config)[0] if config.fast_mode else set(paths)

    with ProgressTracker(len(paths), description="Reading tables") as progress:
        for path in paths:
            progress.start_file(path)
            if path not in to_read:
                logger.info("skip up-to-date file: %s", path)
                skipped.append(path)
                file_stats.append(FileStat(file_name=path.name, status="skipped"))
                progress.finish_file("skipped")
                continue

            reader = reader_for(path)
            if reader is None:  # pragma: no cover (scan で除外済み)
                progress.finish_file("skipped")
                continue

            file_start = datetime.now(UTC)
            logger.info("reading %s", path)
            try:
                file_tables = reader.read_all(path)
            except TableReadError as e:
                progress.finish_file("failed")
                raise ProcessingError(f"read failed: {e}") from e
            elapsed = (datetime.now(UTC) - file_start).total_seconds()

            tables.extend(file_tables)
            rows = sum(len(t.rows) for t in file_tables)
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status="read",
                    tables=len(file_tables),
                    rows=rows,
                    elapsed_seconds=elapsed,
                )
            )
            progress.set_postfix(tables=len(tables))
            progress.finish_file("read")

    return tables, file_stats, skipped


def _report_validation_errors(errors: Sequence[ErrorRecord], config: BuildConfig) -> Path | None:
    error_log = ErrorLogBuffer(Path(config.log_directory))
    for record in errors:
        logger.error("%s", record)
        error_log.append(record)
    try:
        return error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で検証結果を隠さない
        logger.warning("could not write error log: %s", e)
        return None


def process_all(
    config: BuildConfig, *, encoders: Sequence[Encoder] | None = None
) -> BuildResult:
    """Run one full build.

    Args:
        config: Build configuration
        encoders: Override the encoders built from ``config`` (tests)

    Returns:
        BuildResult with aggregated metrics

    Raises:
        ValidationFailedError: validation produced ErrorRecords
        ProcessingError: any other fatal error
    """
    start_time = datetime.now(UTC)

    paths = scan_source_files(Path(config.source_directory))
    tables, file_stats, skipped = read_sources(paths, config)

    artifacts_count = 0
    written: list[Path] = []
    if tables:
        try:
            tables = transform(tables, config)
        except DuplicateTableError as e:
            raise ProcessingError(f"transform failed: {e}") from e

        external = {name for p in skipped for name in output_table_names(p, config)}
        errors = validate_all(tables, external_tables=external)
        if errors:
            log_path = _report_validation_errors(errors, config)
            raise ValidationFailedError(errors, log_path)

        try:
            artifacts = encode_tables(tables, config, encoders=encoders)
        except EncodePhaseError as e:
            raise ProcessingError(f"encode failed: {e}") from e

        try:
            written = write_artifacts(artifacts, config)
            written += sync_artifacts(artifacts, config)
        except ArtifactWriteError as e:
            raise ProcessingError(f"output failed: {e}") from e
        artifacts_count = len(artifacts)
    else:
        logger.info("no tables to build")

    end_time = datetime.now(UTC)
    return BuildResult(
        total_files=len(paths),
        read_files=sum(1 for s in file_stats if s.status == "read"),
        skipped_files=len(skipped),
        total_tables=len(tables),
        total_rows=sum(len(t.rows) for t in tables),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        artifacts=artifacts_count,
        written_paths=written,
        file_stats=file_stats,
    )
