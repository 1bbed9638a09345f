from __future__ import annotations

import math
from typing import Any

from ..models.artifact import ConvertedArtifact
from ..models.table import Column, Table
from .base import Encoder, ordered_meta

"""Scripting-language literal (PHP array) encoder.

The field order is a compatibility contract with the game server loaders:

    name, columns (name, type, comment, required, default, options, ref),
    rows, meta

Strings use single quotes with ``\\`` and ``'`` escaped.
"""

__all__ = [
    "PhpEncoder",
    "php_literal",
    "php_string",
    "render_php",
]

INDENT = "    "


def php_string(text: str) -> str:
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def php_literal(value: Any) -> str:
    """Render a scalar cell value; unsupported values become null."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return php_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    return "null"


def _column_lines(index: int, column: Column) -> list[str]:
    pad = INDENT * 3
    lines = [
        f"{INDENT * 2}{index} => [",
        f"{pad}'name' => {php_string(column.name)},",
        f"{pad}'type' => {php_string(column.type)},",
        f"{pad}'comment' => {php_string(column.comment)},",
        f"{pad}'required' => {php_literal(column.required)},",
        f"{pad}'default' => {php_literal(column.default)},",
    ]
    if column.options:
        lines.append(f"{pad}'options' => [")
        for j, opt in enumerate(column.options):
            lines.append(f"{INDENT * 4}{j} => {php_string(opt)},")
        lines.append(f"{pad}],")
    else:
        lines.append(f"{pad}'options' => [],")
    if column.ref is not None:
        lines.append(
            f"{pad}'ref' => ['sheet' => {php_string(column.ref.table)}, "
            f"'column' => {php_string(column.ref.column)}],"
        )
    else:
        lines.append(f"{pad}'ref' => null,")
    lines.append(f"{INDENT * 2}],")
    return lines


def render_php(table: Table) -> str:
    lines = [
        "<?php",
        f"// Auto-generated data file for {table.name}",
        f"// Table: {table.name}",
        "",
        "return [",
        f"{INDENT}'name' => {php_string(table.name)},",
        f"{INDENT}'columns' => [",
    ]
    for i, column in enumerate(table.columns):
        lines.extend(_column_lines(i, column))
    lines.append(f"{INDENT}],")

    lines.append(f"{INDENT}'rows' => [")
    for i, row in enumerate(table.rows):
        lines.append(f"{INDENT * 2}{i} => [")
        for column in table.columns:
            # 行に列キーが無い場合は null
            value = row.values.get(column.name)
            lines.append(f"{INDENT * 3}{php_string(column.name)} => {php_literal(value)},")
        lines.append(f"{INDENT * 2}],")
    lines.append(f"{INDENT}],")

    lines.append(f"{INDENT}'meta' => [")
    for key, value in ordered_meta(table).items():
        lines.append(f"{INDENT * 2}{php_string(key)} => {php_literal(value)},")
    lines.append(f"{INDENT}],")
    lines.append("];")
    return "\n".join(lines) + "\n"


class PhpEncoder(Encoder):
    format = "php"
    output_suffixes = (".php",)

    def encode(self, table: Table) -> ConvertedArtifact:
        return ConvertedArtifact(
            file_name=f"{table.name}.php",
            content=render_php(table).encode("utf-8"),
            format=self.format,
        )
