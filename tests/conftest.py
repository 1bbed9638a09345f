# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pandas as pd
import pytest

from gamedata_builder.logging.init import reset_logging

# どの環境でも見つからないコンパイラ名 (fbs は縮退モードで出力される)
MISSING_FLATC = "gamedata-test-flatc-not-installed"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "conf").mkdir()
        (p / "tables").mkdir()
        (p / "output").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for name in ("GAMEDATA_SOURCE_DIR", "GAMEDATA_OUTPUT_DIR", "GAMEDATA_GAME_DIR"):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return f"""source_directory: ./tables
output_directory: ./output
formats: [json, php, fbs]
async: false
fast_mode: false
log_directory: ./logs
converters:
  json:
    output_path: json
    options:
      indent: true
  php:
    output_path: php
  fbs:
    output_path: fbs
    options:
      flatc: {MISSING_FLATC}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "conf" / "build.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


def _as_text_rows(rows: Sequence[Sequence[object]]) -> list[list[str]]:
    return [["" if v is None else str(v) for v in row] for row in rows]


@pytest.fixture()
def make_csv() -> Callable[[Path, Sequence[Sequence[object]]], Path]:
    """Write rows to a CSV file (all cells as text, None -> empty)."""
    def _make(path: Path, rows: Sequence[Sequence[object]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(_as_text_rows(rows)).to_csv(path, header=False, index=False)
        return path
    return _make


@pytest.fixture()
def make_excel() -> Callable[[Path, dict[str, Sequence[Sequence[object]]]], Path]:
    """Create a real workbook with one sheet per mapping entry."""
    def _make(path: Path, sheets: dict[str, Sequence[Sequence[object]]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _make


@pytest.fixture()
def items_rows() -> list[list[object]]:
    return [
        ["id", "name", "price", "rarity", "owner_id"],
        ["int", "string", "float", "string", "int"],
        ["必填", "必填", "选填|默认:0.5", "选项:common,rare", "选填|引用:owners.id"],
        [1, "sword", 10.5, "common", 100],
        [2, "shield", None, "rare", None],
    ]


@pytest.fixture()
def owners_rows() -> list[list[object]]:
    return [
        ["id", "name"],
        ["int", "string"],
        ["必填", "必填"],
        [100, "smith"],
        [200, "merchant"],
    ]


@pytest.fixture()
def sample_table():
    """Small validated table used by the encoder tests."""
    from gamedata_builder.models.row_data import RowData
    from gamedata_builder.models.table import Column, ColumnKind, ColumnRef, Table

    return Table(
        name="items",
        columns=[
            Column("id", "int", ColumnKind.INTEGER, comment="必填"),
            Column("name", "string", ColumnKind.STRING, comment="必填"),
            Column("price", "float", ColumnKind.FLOAT, comment="选填|默认:0.5", required=False, default=0.5),
            Column("rarity", "string", ColumnKind.STRING, comment="选项:common,rare", options=("common", "rare")),
            Column(
                "owner_id", "int", ColumnKind.INTEGER,
                comment="选填|引用:owners.id", required=False, ref=ColumnRef("owners", "id"),
            ),
            Column("tradable", "bool", ColumnKind.BOOLEAN),
        ],
        rows=[
            RowData(4, {"id": 1, "name": "it's", "price": 10.5, "rarity": "common", "owner_id": 100, "tradable": True}),
            RowData(5, {"id": 2, "name": "盾", "price": 0.5, "rarity": "rare", "owner_id": None, "tradable": False}),
        ],
        meta={"version": 3, "author": "design"},
    )
