from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from typing import Any

from ..models.error_record import TABLE_LEVEL_ROW, ErrorRecord
from ..models.table import Column, ColumnKind, Table

"""Integrity validation over the transformed table set.

Two independent checks, both exhaustive (every violation is reported):

- per cell: required / declared type / enumeration
- cross table: foreign-key values must exist in the first column of the
  referenced table

validate_all returns per-table records first (table order), then the
reference records.
"""

__all__ = [
    "build_key_index",
    "validate_all",
    "validate_references",
    "validate_table",
]

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _is_number(value: Any) -> bool:
    # bool は int のサブクラスなので数値扱いしない
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _key_of(value: Any) -> tuple[str, Any]:
    # True と 1 を同じキーにしない。int と float は同じ数値として扱う
    if _is_number(value):
        return ("number", value)
    return (type(value).__name__, value)


def _matches_kind(value: Any, kind: ColumnKind) -> bool:
    if kind in (ColumnKind.INTEGER, ColumnKind.FLOAT):
        # 整数列の小数値も許容 (数値型は相互に置換可能)
        return _is_number(value)
    if kind is ColumnKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is ColumnKind.STRING:
        return isinstance(value, str)
    return True


def _check_cell(table: Table, row_number: int, column: Column, value: Any) -> list[ErrorRecord]:
    errors: list[ErrorRecord] = []
    if _is_empty(value):
        if column.required:
            errors.append(
                ErrorRecord(table.name, row_number, column.name, "required value is empty")
            )
        return errors

    if not _matches_kind(value, column.kind):
        errors.append(
            ErrorRecord(
                table.name,
                row_number,
                column.name,
                f"type mismatch: expected {column.type}, got {type(value).__name__} {value!r}",
            )
        )

    if column.options and isinstance(value, str) and value not in column.options:
        errors.append(
            ErrorRecord(
                table.name,
                row_number,
                column.name,
                f"value {value!r} not in options {list(column.options)}",
            )
        )
    return errors


def validate_table(table: Table) -> list[ErrorRecord]:
    """Check required / type / enumeration for every cell of ``table``."""
    errors: list[ErrorRecord] = []
    for row in table.rows:
        for column in table.columns:
            errors.extend(_check_cell(table, row.row_number, column, row.values.get(column.name)))
    return errors


def build_key_index(tables: Sequence[Table]) -> dict[str, set[tuple[str, Any]]]:
    """Table name -> typed keys of the non-null values in its first column.

    A key is ``(type class, value)``; ints and floats share the ``number``
    class, so ``1`` matches ``1.0`` but never ``True`` or ``"1"``.
    """
    index: dict[str, set[tuple[str, Any]]] = {}
    for table in tables:
        keys: set[tuple[str, Any]] = set()
        key_column = table.key_column
        if key_column is not None:
            for row in table.rows:
                value = row.values.get(key_column.name)
                if value is not None:
                    keys.add(_key_of(value))
        index[table.name] = keys
    return index


def validate_references(
    tables: Sequence[Table], *, external_tables: Collection[str] = ()
) -> list[ErrorRecord]:
    """Check every ``ref:`` column against the referenced table's keys.

    Parameters
    ----------
    tables: full table collection
    external_tables: names known to exist but not loaded in this run
        (fast mode); references into them are not checked
    """
    index = build_key_index(tables)
    errors: list[ErrorRecord] = []
    for table in tables:
        for column in table.columns:
            ref = column.ref
            if ref is None:
                continue
            keys = index.get(ref.table)
            if keys is None:
                if ref.table in external_tables:
                    logger.debug(
                        "skip reference check %s.%s -> %s (not loaded)",
                        table.name, column.name, ref.table,
                    )
                    continue
                errors.append(
                    ErrorRecord(
                        table.name,
                        TABLE_LEVEL_ROW,
                        column.name,
                        f"referenced table {ref.table!r} does not exist",
                    )
                )
                continue
            for row in table.rows:
                value = row.values.get(column.name)
                if _is_empty(value):
                    continue
                if _key_of(value) not in keys:
                    errors.append(
                        ErrorRecord(
                            table.name,
                            row.row_number,
                            column.name,
                            f"referenced value {value!r} not found in table {ref.table!r}",
                        )
                    )
    return errors


def validate_all(
    tables: Sequence[Table], *, external_tables: Collection[str] = ()
) -> list[ErrorRecord]:
    errors: list[ErrorRecord] = []
    for table in tables:
        errors.extend(validate_table(table))
    errors.extend(validate_references(tables, external_tables=external_tables))
    return errors
