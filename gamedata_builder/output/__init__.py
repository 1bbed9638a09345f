from .writer import (
    ArtifactWriteError,
    output_directory_for,
    sync_artifacts,
    write_artifact,
    write_artifacts,
)

__all__ = [
    "ArtifactWriteError",
    "output_directory_for",
    "sync_artifacts",
    "write_artifact",
    "write_artifacts",
]
