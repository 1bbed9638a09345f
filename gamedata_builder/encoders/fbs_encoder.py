from __future__ import annotations

import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from ..models.artifact import ConvertedArtifact
from ..models.table import ColumnKind, Table
from .base import EncodeError, Encoder

"""Schema + payload encoder for the FlatBuffers compiler (flatc).

For each table a FlatBuffers schema and a canonical JSON payload are built.
When ``flatc`` is available they are compiled to ``<table>.bin``. Without
the compiler, or when it exits non-zero, the encoder runs in degraded mode
and returns the schema text as ``<table>.fbs`` (warning only, not an error).
"""

__all__ = [
    "FlatBuffersEncoder",
    "build_payload",
    "build_schema",
]

logger = logging.getLogger(__name__)

# 4種分類 -> FlatBuffers のスカラー型
FBS_TYPES: dict[ColumnKind, str] = {
    ColumnKind.INTEGER: "int32",
    ColumnKind.FLOAT: "float64",
    ColumnKind.BOOLEAN: "bool",
    ColumnKind.STRING: "string",
}

# ColumnType enum の値 (スキーマの並びと一致させる)
COLUMN_TYPE_VALUES: dict[ColumnKind, int] = {
    ColumnKind.INTEGER: 0,
    ColumnKind.FLOAT: 1,
    ColumnKind.BOOLEAN: 2,
    ColumnKind.STRING: 3,
}


def build_schema(table: Table) -> str:
    name = table.name
    lines = [
        f"// Auto-generated schema for {name}",
        "",
        f"namespace {name};",
        "",
        "enum ColumnType : byte {",
        "    INT,",
        "    FLOAT,",
        "    BOOL,",
        "    STRING,",
        "}",
        "",
        "table ColumnInfo {",
        "    name:string;",
        "    type:ColumnType;",
        "    comment:string;",
        "    required:bool = true;",
        "    default:string;",
        "    options:[string];",
        "}",
        "",
        f"table RowData_{name} {{",
    ]
    for column in table.columns:
        lines.append(f"    {column.name}:{FBS_TYPES[column.kind.storage_kind]};")
    lines += [
        "}",
        "",
        f"table Data_{name} {{",
        "    name:string;",
        "    columns:[ColumnInfo];",
        f"    rows:[RowData_{name}];",
        "    meta:[string];",
        "}",
        "",
        f"root_type Data_{name};",
    ]
    return "\n".join(lines) + "\n"


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_payload(table: Table) -> bytes:
    """Canonical JSON rendering of ``table`` matching build_schema."""
    columns = []
    for column in table.columns:
        doc: dict[str, Any] = {
            "name": column.name,
            "type": COLUMN_TYPE_VALUES[column.kind.storage_kind],
            "comment": column.comment,
            "required": column.required,
            "options": list(column.options),
        }
        if column.default is not None:
            doc["default"] = _text(column.default)
        columns.append(doc)

    rows = []
    for row in table.rows:
        rows.append(
            {c.name: row.values[c.name] for c in table.columns if row.values.get(c.name) is not None}
        )

    data = {
        "name": table.name,
        "columns": columns,
        "rows": rows,
        "meta": sorted(f"{k}:{_text(v)}" for k, v in table.meta.items()),
    }
    try:
        text = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"fbs: cannot build payload for {table.name}: {e}") from e
    return text.encode("utf-8")


class FlatBuffersEncoder(Encoder):
    format = "fbs"
    output_suffixes = (".bin", ".fbs")

    @property
    def compiler(self) -> str:
        return str(self.options.get("flatc") or "flatc")

    def encode(self, table: Table) -> ConvertedArtifact:
        schema = build_schema(table)
        payload = build_payload(table)
        binary = self.compile(table.name, schema, payload)
        if binary is None:
            return ConvertedArtifact(
                file_name=f"{table.name}.fbs",
                content=schema.encode("utf-8"),
                format=self.format,
            )
        return ConvertedArtifact(
            file_name=f"{table.name}.bin", content=binary, format=self.format
        )

    def compile(self, name: str, schema: str, payload: bytes) -> bytes | None:
        """Run flatc; None means degraded mode (schema only)."""
        flatc = shutil.which(self.compiler)
        if flatc is None:
            logger.warning("flatc not found (%s); writing schema only for %s", self.compiler, name)
            return None

        # 並行実行でも衝突しないようテーブル毎に専用ディレクトリを使う
        with tempfile.TemporaryDirectory(prefix="gamedata-fbs-") as tmp:
            tmp_dir = Path(tmp)
            schema_path = tmp_dir / f"{name}.fbs"
            json_path = tmp_dir / f"{name}.json"
            schema_path.write_text(schema, encoding="utf-8")
            json_path.write_bytes(payload)
            try:
                proc = subprocess.run(
                    [flatc, "-b", "-o", str(tmp_dir), str(schema_path), str(json_path)],
                    cwd=tmp_dir,
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except OSError as e:
                logger.warning("flatc could not be started for %s: %s", name, e)
                return None
            if proc.returncode != 0:
                logger.warning(
                    "flatc failed for %s (exit %d): %s",
                    name,
                    proc.returncode,
                    proc.stderr.strip(),
                )
                return None
            bin_path = tmp_dir / f"{name}.bin"
            if not bin_path.exists():
                raise EncodeError(f"fbs: flatc produced no binary for {name}")
            return bin_path.read_bytes()
