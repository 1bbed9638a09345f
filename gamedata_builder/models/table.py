from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .row_data import RowData

"""Table / Column domain models for the game data builder.

A Table is one logical sheet: the column descriptors parsed from the three
header rows plus the typed data rows below them. Readers create tables,
the transformer mutates them in place, validator and encoders only read.
"""

__all__ = [
    "CellValue",
    "Column",
    "ColumnKind",
    "ColumnRef",
    "Table",
]

# 行セルの値。None は「値なし・デフォルトなし」
CellValue = Union[int, float, bool, str, None]


class ColumnKind(Enum):
    """Resolved semantic type of a column.

    OPAQUE is an unrecognized type tag: values pass through as text and
    are never type-checked.
    """
    INTEGER = "int"
    FLOAT = "float"
    BOOLEAN = "bool"
    STRING = "string"
    OPAQUE = "opaque"

    @property
    def storage_kind(self) -> ColumnKind:
        """4-way classification used by binary schemas (OPAQUE -> STRING)."""
        return ColumnKind.STRING if self is ColumnKind.OPAQUE else self


@dataclass(frozen=True)
class ColumnRef:
    """Foreign-key target declared with ``ref:<table>.<column>``."""
    table: str
    column: str


@dataclass(frozen=True)
class Column:
    """Per-column schema parsed from the header block."""
    name: str
    type: str  # 型タグ (記述どおり)
    kind: ColumnKind
    comment: str = ""  # アノテーション行の原文
    required: bool = True
    default: CellValue = None
    options: tuple[str, ...] = ()
    ref: ColumnRef | None = None


@dataclass
class Table:
    """One named, typed, row-oriented dataset."""
    name: str
    columns: list[Column] = field(default_factory=list)
    rows: list[RowData] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def key_column(self) -> Column | None:
        """First declared column; the only join key for references."""
        return self.columns[0] if self.columns else None

    def column(self, name: str) -> Column | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def __len__(self) -> int:
        return len(self.rows)
