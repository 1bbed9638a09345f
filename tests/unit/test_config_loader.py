from __future__ import annotations

from pathlib import Path

import pytest

from gamedata_builder.config.loader import ConfigError, load_config
from gamedata_builder.models.config_models import MergeGroup, ReplaceRule


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./tables"
    assert cfg.output_directory == "./output"
    assert cfg.formats == ("json", "php", "fbs")
    assert cfg.async_encode is False
    assert cfg.fast_mode is False
    assert cfg.converter("json").output_path == "json"
    assert cfg.converter("json").options == {"indent": True}
    assert cfg.enabled_formats == ["json", "php", "fbs"]
    assert cfg.merge_groups == ()
    assert cfg.replace_rules == ()


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "conf" / "not_exists.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "conf" / "build.yml"
    path.write_text("formats: [json\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_missing_required(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("output_directory: ./output\n", "")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_config_unknown_format(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("[json, php, fbs]", "[json, xml]")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="formats"):
        load_config(write_config)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_load_config_duplicate_merge_source(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + """
combine:
  g:
    source_sheets: [a, a]
    output_name: ab
"""
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_converter_disabled_and_default(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "  php:\n    output_path: php\n", "  php:\n    enabled: false\n"
    )
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.enabled_formats == ["json", "fbs"]


def test_format_without_converter_entry(temp_workdir: Path):
    path = temp_workdir / "conf" / "build.yml"
    path.write_text("source_directory: a\noutput_directory: b\nformats: [php]\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.enabled_formats == ["php"]
    assert cfg.converter("php").output_path == ""
    assert cfg.log_directory == "./logs"


def test_combine_and_replace_columns(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + """
combine:
  items:
    source_sheets: [weapons, armors]
    output_name: items
    key_column: id
  npcs:
    source_sheets: [merchants]
    output_name: npc
replace_columns:
  items:
    columns:
      icon: {from: "old/", to: "new/"}
      model: {from: ".fbx", to: ""}
"""
    write_config.write_text(text, encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.merge_groups == (
        MergeGroup(name="items", source_sheets=("weapons", "armors"), output_name="items", key_column="id"),
        MergeGroup(name="npcs", source_sheets=("merchants",), output_name="npc"),
    )
    assert cfg.replace_rules == (
        ReplaceRule(table="items", column="icon", old="old/", new="new/"),
        ReplaceRule(table="items", column="model", old=".fbx", new=""),
    )


def test_env_overrides_directories(write_config: Path, monkeypatch):
    monkeypatch.setenv("GAMEDATA_SOURCE_DIR", "/srv/tables")
    monkeypatch.setenv("GAMEDATA_GAME_DIR", "/srv/game")
    cfg = load_config(write_config)
    assert cfg.source_directory == "/srv/tables"
    assert cfg.output_directory == "./output"
    assert cfg.game_directory == "/srv/game"
