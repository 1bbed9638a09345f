from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..models.artifact import ConvertedArtifact
from ..models.config_models import BuildConfig

"""Artifact writer: puts encoded artifacts on disk.

Layout: ``<output_directory>/<converters.<fmt>.output_path>/<file_name>``.
With ``sync_to_game`` the same bytes are also written under
``<game_directory>/<output_path>/``. The first OSError aborts the rest.
"""

__all__ = [
    "ArtifactWriteError",
    "output_directory_for",
    "sync_artifacts",
    "write_artifact",
    "write_artifacts",
]

logger = logging.getLogger(__name__)


class ArtifactWriteError(Exception):
    """Raised when an artifact cannot be written."""


def output_directory_for(base: str | Path, config: BuildConfig, fmt: str) -> Path:
    sub = config.converter(fmt).output_path
    return Path(base) / sub if sub else Path(base)


def write_artifact(artifact: ConvertedArtifact, directory: Path) -> Path:
    target = directory / artifact.file_name
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.content)
    except OSError as e:
        raise ArtifactWriteError(f"cannot write {target}: {e}") from e
    return target


def _write_all(
    artifacts: Iterable[ConvertedArtifact], base: str | Path, config: BuildConfig
) -> list[Path]:
    written: list[Path] = []
    for artifact in artifacts:
        path = write_artifact(artifact, output_directory_for(base, config, artifact.format))
        logger.debug("wrote %s (%d bytes)", path, artifact.size)
        written.append(path)
    return written


def write_artifacts(artifacts: Iterable[ConvertedArtifact], config: BuildConfig) -> list[Path]:
    """Write every artifact under the output directory."""
    return _write_all(artifacts, config.output_directory, config)


def sync_artifacts(artifacts: Iterable[ConvertedArtifact], config: BuildConfig) -> list[Path]:
    """Copy artifacts to the game directory when sync is configured."""
    if not config.sync_to_game or not config.game_directory:
        return []
    written = _write_all(artifacts, config.game_directory, config)
    logger.info("synced %d files to %s", len(written), config.game_directory)
    return written
