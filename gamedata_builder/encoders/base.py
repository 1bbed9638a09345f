from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from ..models.artifact import ConvertedArtifact
from ..models.table import Column, Table

"""Encoder capability set shared by every output format.

An encoder turns one validated Table into one ConvertedArtifact. Batches
delegate to encode() and fail as a whole on the first error. Encoders only
read tables; the same table set is handed to all formats at once when the
encode phase runs concurrently.
"""

__all__ = [
    "EncodeError",
    "Encoder",
    "column_document",
    "ordered_meta",
]

logger = logging.getLogger(__name__)


class EncodeError(Exception):
    """Raised when a table cannot be encoded into the target format."""


class Encoder(ABC):
    format: ClassVar[str] = ""
    # fast mode の最新判定に使う出力ファイル拡張子
    output_suffixes: ClassVar[tuple[str, ...]] = ()

    def __init__(self, options: dict[str, Any] | None = None) -> None:
        self.options: dict[str, Any] = dict(options or {})

    @abstractmethod
    def encode(self, table: Table) -> ConvertedArtifact:
        """Encode one table."""

    def encode_batch(self, tables: Iterable[Table]) -> list[ConvertedArtifact]:
        artifacts: list[ConvertedArtifact] = []
        for table in tables:
            try:
                artifacts.append(self.encode(table))
            except EncodeError:
                raise
            except Exception as e:
                raise EncodeError(f"{self.format}: failed to encode {table.name}: {e}") from e
        logger.debug("%s encoded %d tables", self.format, len(artifacts))
        return artifacts


def column_document(column: Column) -> dict[str, Any]:
    """Column descriptor as a plain mapping (field order is significant)."""
    return {
        "name": column.name,
        "type": column.type,
        "comment": column.comment,
        "required": column.required,
        "default": column.default,
        "options": list(column.options),
        "ref": (
            {"sheet": column.ref.table, "column": column.ref.column}
            if column.ref is not None
            else None
        ),
    }


def ordered_meta(table: Table) -> dict[str, Any]:
    """Metadata with sorted keys so output does not depend on insertion order."""
    return {str(k): table.meta[k] for k in sorted(table.meta, key=str)}
