from __future__ import annotations

from pathlib import Path

import pytest

from gamedata_builder.readers.base import TableReadError, build_table

SOURCE = Path("items.csv")


def test_fewer_than_three_rows_is_no_table():
    assert build_table("items", [], source=SOURCE) is None
    assert build_table("items", [["id"], ["int"]], source=SOURCE) is None


def test_header_only_gives_empty_table():
    table = build_table("items", [["id"], ["int"], [""]], source=SOURCE)
    assert table is not None
    assert [c.name for c in table.columns] == ["id"]
    assert table.rows == []


def test_rows_are_coerced_and_numbered():
    grid = [
        ["id", "name"],
        ["int", "string"],
        ["", ""],
        ["1", "a"],
        ["", "skipped"],
        ["3", "c"],
    ]
    table = build_table("items", grid, source=SOURCE)
    assert table is not None
    assert [r.values for r in table.rows] == [{"id": 1, "name": "a"}, {"id": 3, "name": "c"}]
    # 4行目がデータ1行目
    assert [r.row_number for r in table.rows] == [4, 6]


def test_spacer_column_keeps_alignment():
    grid = [
        ["id", "", "name"],
        ["int", "", "string"],
        ["", "", ""],
        ["1", "memo", "a"],
    ]
    table = build_table("items", grid, source=SOURCE)
    assert table is not None
    assert [c.name for c in table.columns] == ["id", "name"]
    assert table.rows[0].values == {"id": 1, "name": "a"}


def test_empty_cell_takes_default_or_none():
    grid = [
        ["id", "lv", "memo"],
        ["int", "int", "string"],
        ["", "默认:7", ""],
        ["1", "", ""],
    ]
    table = build_table("items", grid, source=SOURCE)
    assert table is not None
    assert table.rows[0].values == {"id": 1, "lv": 7, "memo": None}


def test_short_row_is_padded_with_empty_cells():
    grid = [["id", "name"], ["int", "string"], ["", ""], ["1"]]
    table = build_table("items", grid, source=SOURCE)
    assert table is not None
    assert table.rows[0].values == {"id": 1, "name": None}


def test_coercion_failure_reports_location():
    grid = [["id", "lv"], ["int", "int"], ["", ""], ["1", "2"], ["2", "high"]]
    with pytest.raises(TableReadError) as e:
        build_table("items", grid, source=SOURCE)
    err = e.value
    assert err.file == "items.csv"
    assert err.sheet == "items"
    assert err.row == 5
    assert err.column == "lv"
    assert "cannot convert 'high' to int" in str(err)


def test_optional_column_default_zero():
    grid = [["id", "count"], ["int", "int"], ["", "选填|默认:0"], ["1", ""]]
    table = build_table("items", grid, source=SOURCE)
    assert table is not None
    value = table.rows[0].values["count"]
    assert value == 0 and isinstance(value, int) and not isinstance(value, bool)
