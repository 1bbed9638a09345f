from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from ..encoders import Encoder, create_encoder
from ..models.artifact import ConvertedArtifact
from ..models.config_models import BuildConfig
from ..models.table import Table

"""Encode phase: run every enabled encoder over the validated table set.

Synchronous mode encodes formats one after another in configured order and
stops at the first failing format. Concurrent mode submits one unit of work
per format to a thread pool, all against the same read-only snapshot of the
tables, and waits for every unit before deciding; a failing unit does not
cancel the others.
"""

__all__ = [
    "EncodePhaseError",
    "FormatEncodeResult",
    "build_encoders",
    "encode_tables",
    "run_concurrent",
    "run_sequential",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatEncodeResult:
    """Outcome of one format's unit of work."""
    format: str
    artifacts: tuple[ConvertedArtifact, ...] = ()
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EncodePhaseError(Exception):
    """Raised when at least one format failed; carries every unit's result."""

    def __init__(self, message: str, results: Sequence[FormatEncodeResult]) -> None:
        super().__init__(message)
        self.results = list(results)

    @property
    def failed_formats(self) -> list[str]:
        return [r.format for r in self.results if not r.ok]


def build_encoders(config: BuildConfig) -> list[Encoder]:
    """Encoders for the enabled formats, in configured order."""
    return [create_encoder(fmt, config.converter(fmt).options) for fmt in config.enabled_formats]


def _run_unit(encoder: Encoder, tables: tuple[Table, ...]) -> FormatEncodeResult:
    logger.info("encoding %d tables as %s", len(tables), encoder.format)
    try:
        artifacts = encoder.encode_batch(tables)
    except Exception as e:
        logger.error("%s encode failed: %s", encoder.format, e)
        return FormatEncodeResult(format=encoder.format, error=e)
    return FormatEncodeResult(format=encoder.format, artifacts=tuple(artifacts))


def run_sequential(
    encoders: Sequence[Encoder], tables: Sequence[Table]
) -> list[FormatEncodeResult]:
    snapshot = tuple(tables)
    results: list[FormatEncodeResult] = []
    for encoder in encoders:
        result = _run_unit(encoder, snapshot)
        results.append(result)
        if not result.ok:
            break
    return results


def run_concurrent(
    encoders: Sequence[Encoder], tables: Sequence[Table]
) -> list[FormatEncodeResult]:
    """Fan out one unit per encoder and join all of them.

    Results are returned in encoder order regardless of completion order.
    """
    if not encoders:
        return []
    snapshot = tuple(tables)
    by_index: dict[int, FormatEncodeResult] = {}
    with ThreadPoolExecutor(max_workers=len(encoders), thread_name_prefix="encode") as pool:
        futures: dict[Future[FormatEncodeResult], int] = {
            pool.submit(_run_unit, encoder, snapshot): idx for idx, encoder in enumerate(encoders)
        }
        for future in as_completed(futures):
            by_index[futures[future]] = future.result()
    return [by_index[i] for i in range(len(encoders))]


def encode_tables(
    tables: Sequence[Table],
    config: BuildConfig,
    *,
    encoders: Sequence[Encoder] | None = None,
) -> list[ConvertedArtifact]:
    """Run the encode phase and flatten artifacts in format order.

    Raises:
        EncodePhaseError: any format failed (after all units reported)
    """
    if encoders is None:
        encoders = build_encoders(config)
    if config.async_encode:
        results = run_concurrent(encoders, tables)
    else:
        results = run_sequential(encoders, tables)

    failed = [r for r in results if not r.ok]
    if failed:
        first = failed[0]
        raise EncodePhaseError(
            f"encode failed for {[r.format for r in failed]}: {first.error}", results
        ) from first.error

    artifacts: list[ConvertedArtifact] = []
    for result in results:
        artifacts.extend(result.artifacts)
    return artifacts
