from __future__ import annotations

import os
from pathlib import Path

import pytest

from gamedata_builder.models.artifact import ConvertedArtifact
from gamedata_builder.models.config_models import BuildConfig, ConverterConfig, MergeGroup
from gamedata_builder.output import ArtifactWriteError, output_directory_for, sync_artifacts, write_artifacts
from gamedata_builder.services.staleness import (
    expected_artifacts,
    needs_processing,
    output_table_names,
    plan_fast_build,
    source_table_names,
)


def _config(tmp_path: Path, **kwargs) -> BuildConfig:
    return BuildConfig(
        source_directory=str(tmp_path / "tables"),
        output_directory=str(tmp_path / "output"),
        converters={
            "json": ConverterConfig("json", output_path="json"),
            "php": ConverterConfig("php", output_path="php"),
            "fbs": ConverterConfig("fbs", output_path="fbs"),
        },
        **kwargs,
    )


def _touch(path: Path, mtime: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    os.utime(path, (mtime, mtime))


def test_output_directory_for(tmp_path: Path):
    config = _config(tmp_path)
    assert output_directory_for("out", config, "json") == Path("out/json")
    bare = BuildConfig(source_directory="s", output_directory="out")
    assert output_directory_for("out", bare, "json") == Path("out")


def test_expected_artifacts(tmp_path: Path):
    config = _config(tmp_path)
    assert expected_artifacts("items", config, "fbs") == [
        tmp_path / "output" / "fbs" / "items.bin",
        tmp_path / "output" / "fbs" / "items.fbs",
    ]
    assert expected_artifacts("items", config, "xml") == []


def test_needs_processing_when_artifact_missing(tmp_path: Path):
    config = _config(tmp_path)
    src = tmp_path / "tables" / "items.csv"
    _touch(src, 1000)
    _touch(tmp_path / "output" / "json" / "items.json", 2000)
    assert needs_processing(src, config) is True


def test_up_to_date_when_every_format_is_fresh(tmp_path: Path):
    config = _config(tmp_path)
    src = tmp_path / "tables" / "items.csv"
    _touch(src, 1000)
    _touch(tmp_path / "output" / "json" / "items.json", 2000)
    _touch(tmp_path / "output" / "php" / "items.php", 1000)
    _touch(tmp_path / "output" / "fbs" / "items.fbs", 2000)
    assert needs_processing(src, config) is False


def test_stale_when_artifact_older(tmp_path: Path):
    config = _config(tmp_path)
    src = tmp_path / "tables" / "items.csv"
    _touch(src, 3000)
    for rel in ("json/items.json", "php/items.php", "fbs/items.bin"):
        _touch(tmp_path / "output" / rel, 2000)
    assert needs_processing(src, config) is True


def test_missing_source_needs_processing(tmp_path: Path):
    assert needs_processing(tmp_path / "nope.csv", _config(tmp_path)) is True


def test_source_table_names_lists_visible_sheets(tmp_path: Path, make_excel):
    book = make_excel(tmp_path / "data.xlsx", {"items": [["id"]], "_memo": [["x"]], "owners": [["id"]]})
    assert source_table_names(book) == ["items", "owners"]
    assert source_table_names(tmp_path / "items.csv") == ["items"]


def test_source_table_names_unreadable_workbook(tmp_path: Path):
    broken = tmp_path / "broken.xlsx"
    broken.write_bytes(b"not a zip")
    assert source_table_names(broken) == []
    assert needs_processing(broken, _config(tmp_path)) is True


def test_output_table_names_follow_merge_groups(tmp_path: Path):
    config = _config(
        tmp_path,
        merge_groups=(
            MergeGroup("ab", ("a", "b"), "ab"),
            MergeGroup("all", ("ab", "c"), "all"),
        ),
    )
    assert output_table_names(tmp_path / "a.csv", config) == ["all"]
    assert output_table_names(tmp_path / "d.csv", config) == ["d"]


def test_workbook_up_to_date_by_sheet_artifacts(tmp_path: Path, make_excel):
    config = _config(tmp_path)
    book = make_excel(tmp_path / "tables" / "data.xlsx", {"items": [["id"]], "owners": [["id"]]})
    os.utime(book, (1000, 1000))
    for rel in ("json/items.json", "php/items.php", "fbs/items.fbs", "json/owners.json", "php/owners.php"):
        _touch(tmp_path / "output" / rel, 2000)
    assert needs_processing(book, config) is True
    _touch(tmp_path / "output" / "fbs" / "owners.bin", 2000)
    assert needs_processing(book, config) is False


def test_plan_rereads_every_source_of_a_stale_merge(tmp_path: Path):
    config = _config(tmp_path, merge_groups=(MergeGroup("owners", ("owners_a", "owners_b"), "owners"),))
    tables = tmp_path / "tables"
    a, b, items = tables / "owners_a.csv", tables / "owners_b.csv", tables / "items.csv"
    for src in (a, b, items):
        _touch(src, 1000)
    for name in ("owners", "items"):
        for rel in (f"json/{name}.json", f"php/{name}.php", f"fbs/{name}.fbs"):
            _touch(tmp_path / "output" / rel, 2000)

    stale, outputs = plan_fast_build([a, b, items], config)
    assert stale == set()
    assert outputs[a] == ["owners"]

    os.utime(b, (3000, 3000))
    stale, _ = plan_fast_build([a, b, items], config)
    assert stale == {a, b}


def test_write_artifacts(tmp_path: Path):
    config = _config(tmp_path)
    artifacts = [
        ConvertedArtifact("items.json", b"{}", "json"),
        ConvertedArtifact("items.php", b"<?php", "php"),
    ]
    written = write_artifacts(artifacts, config)
    assert written == [tmp_path / "output" / "json" / "items.json", tmp_path / "output" / "php" / "items.php"]
    assert written[1].read_bytes() == b"<?php"


def test_sync_requires_flag_and_directory(tmp_path: Path):
    artifacts = [ConvertedArtifact("items.json", b"{}", "json")]
    assert sync_artifacts(artifacts, _config(tmp_path)) == []
    assert sync_artifacts(artifacts, _config(tmp_path, sync_to_game=True)) == []
    game = tmp_path / "game"
    written = sync_artifacts(artifacts, _config(tmp_path, sync_to_game=True, game_directory=str(game)))
    assert written == [game / "json" / "items.json"]
    assert written[0].read_bytes() == b"{}"


def test_write_failure_raises(tmp_path: Path):
    blocker = tmp_path / "output"
    blocker.write_text("file, not a directory", encoding="utf-8")
    with pytest.raises(ArtifactWriteError):
        write_artifacts([ConvertedArtifact("items.json", b"{}", "json")], _config(tmp_path))
