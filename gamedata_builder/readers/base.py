from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import ClassVar

from ..models.row_data import RowData
from ..models.table import Column, Table
from .coercion import TypeCoercionError, coerce_value
from .metadata import parse_column

"""Shared table-building logic for all reader variants.

Header block convention (both CSV and spreadsheet sources):

    row 1: column names (empty cell = spacer column, skipped)
    row 2: type tags
    row 3: annotations (see readers.metadata)
    row 4+: data; a row whose first cell is empty is skipped

Readers only turn a source into a grid of cell texts; build_table does the
rest so both variants behave identically apart from type tag case handling.
"""

__all__ = [
    "HEADER_ROWS",
    "TableReadError",
    "TableReader",
    "build_table",
]

HEADER_ROWS = 3


class TableReadError(Exception):
    """Raised when a source file cannot be read into tables.

    Carries file / sheet / row / column context when it is known.
    """

    def __init__(
        self,
        message: str,
        *,
        file: str,
        sheet: str | None = None,
        row: int | None = None,
        column: str | None = None,
    ) -> None:
        self.file = file
        self.sheet = sheet
        self.row = row
        self.column = column
        location = file
        if sheet:
            location += f" sheet={sheet}"
        if row is not None:
            location += f" row={row}"
        if column:
            location += f" column={column}"
        super().__init__(f"{location}: {message}")


class TableReader(ABC):
    """Reader capability set: read all sub-tables / one sub-table of a file."""

    supported_extensions: ClassVar[tuple[str, ...]] = ()
    # 型タグの大文字小文字を区別するか (CSV: 区別する / Excel: 区別しない)
    case_sensitive_types: ClassVar[bool] = True

    @abstractmethod
    def read_all(self, path: Path) -> list[Table]:
        """Read every sub-table of ``path``."""

    @abstractmethod
    def read_sheet(self, path: Path, sheet_name: str | None = None) -> Table | None:
        """Read one sub-table; None when it has fewer than three rows."""

    def supports(self, path: Path) -> bool:
        return path.suffix in self.supported_extensions


def _cell(row: Sequence[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def build_table(
    name: str,
    grid: Sequence[Sequence[str]],
    *,
    source: Path,
    case_sensitive: bool = True,
) -> Table | None:
    """Parse a grid of cell texts into a Table.

    Parameters
    ----------
    name: table name
    grid: rows of cell text, "" for empty cells
    source: file the grid came from (error context only)
    case_sensitive: type tag matching mode

    Returns
    -------
    Table, or None when the grid has fewer than three rows

    Raises
    ------
    TableReadError: a data cell failed type coercion
    """
    if len(grid) < HEADER_ROWS:
        return None

    header, types, annotations = grid[0], grid[1], grid[2]
    # (元の列位置, Column) の組。空ヘッダ列を飛ばしても位置がずれないように保持
    positioned: list[tuple[int, Column]] = []
    for index, raw_name in enumerate(header):
        column = parse_column(
            raw_name,
            _cell(types, index),
            _cell(annotations, index),
            case_sensitive=case_sensitive,
        )
        if column is not None:
            positioned.append((index, column))

    rows: list[RowData] = []
    for offset, line in enumerate(grid[HEADER_ROWS:]):
        row_number = HEADER_ROWS + offset + 1
        if not line or _cell(line, 0) == "":
            continue
        values: dict[str, object] = {}
        for index, column in positioned:
            text = _cell(line, index)
            if text == "":
                values[column.name] = column.default
                continue
            try:
                values[column.name] = coerce_value(
                    text, column.type, case_sensitive=case_sensitive
                )
            except TypeCoercionError as e:
                raise TableReadError(
                    str(e), file=source.name, sheet=name, row=row_number, column=column.name
                ) from e
        rows.append(RowData(row_number=row_number, values=values))

    return Table(name=name, columns=[c for _, c in positioned], rows=rows, meta={})
