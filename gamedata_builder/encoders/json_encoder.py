from __future__ import annotations

import json
from typing import Any

from ..models.artifact import ConvertedArtifact
from ..models.table import Table
from .base import EncodeError, Encoder, column_document, ordered_meta

"""Structured-document (JSON) encoder.

Document layout: {"name", "columns", "rows", "meta"}. Rows are objects
keyed by column name in column order. ``indent: true`` pretty-prints.
"""

__all__ = [
    "JsonEncoder",
    "table_document",
]


def table_document(table: Table) -> dict[str, Any]:
    return {
        "name": table.name,
        "columns": [column_document(c) for c in table.columns],
        "rows": [dict(row.values) for row in table.rows],
        "meta": ordered_meta(table),
    }


class JsonEncoder(Encoder):
    format = "json"
    output_suffixes = (".json",)

    def encode(self, table: Table) -> ConvertedArtifact:
        indent = 2 if self.options.get("indent") else None
        try:
            text = json.dumps(
                table_document(table),
                ensure_ascii=False,
                indent=indent,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise EncodeError(f"json: cannot serialize {table.name}: {e}") from e
        return ConvertedArtifact(
            file_name=f"{table.name}.json",
            content=text.encode("utf-8"),
            format=self.format,
        )
