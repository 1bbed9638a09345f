from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    BuildConfig,
    ConverterConfig,
    MergeGroup,
    ReplaceRule,
)

"""Build config loader.

Responsibilities:
- Load YAML config (default conf/build.yml)
- Validate against the bundled config_schema.json
- Apply environment overrides for directories
- Map raw keys onto the frozen BuildConfig dataclasses
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_OVERRIDES",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("conf/build.yml")

# 環境変数 -> config キー (環境変数が優先)
ENV_OVERRIDES = {
    "GAMEDATA_SOURCE_DIR": "source_directory",
    "GAMEDATA_OUTPUT_DIR": "output_directory",
    "GAMEDATA_GAME_DIR": "game_directory",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Args:
        data: Configuration data to validate

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or if
            the config data fails schema validation (missing required keys,
            wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = ".".join(str(p) for p in e.absolute_path)
        prefix = f"{location}: " if location else ""
        raise ConfigError(f"config validation failed: {prefix}{e.message}") from e


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            merged[key] = value
    return merged


def _converters(raw: dict[str, Any]) -> dict[str, ConverterConfig]:
    return {
        fmt: ConverterConfig(
            format=fmt,
            enabled=entry.get("enabled", True),
            output_path=entry.get("output_path", ""),
            options=dict(entry.get("options") or {}),
        )
        for fmt, entry in raw.items()
    }


def _merge_groups(raw: dict[str, Any]) -> tuple[MergeGroup, ...]:
    # YAML mapping の記述順 = 適用順
    return tuple(
        MergeGroup(
            name=name,
            source_sheets=tuple(entry["source_sheets"]),
            output_name=entry["output_name"],
            key_column=entry.get("key_column"),
        )
        for name, entry in raw.items()
    )


def _replace_rules(raw: dict[str, Any]) -> tuple[ReplaceRule, ...]:
    rules: list[ReplaceRule] = []
    for table, entry in raw.items():
        for column, rule in entry["columns"].items():
            rules.append(ReplaceRule(table=table, column=column, old=rule["from"], new=rule["to"]))
    return tuple(rules)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> BuildConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    data = _apply_env_overrides(data)
    _validate_config_schema(data)

    return BuildConfig(
        source_directory=data["source_directory"],
        output_directory=data["output_directory"],
        formats=tuple(data["formats"]),
        async_encode=data.get("async", False),
        fast_mode=data.get("fast_mode", False),
        sync_to_game=data.get("sync_to_game", False),
        game_directory=data.get("game_directory"),
        log_directory=data.get("log_directory", "./logs"),
        converters=_converters(data.get("converters") or {}),
        merge_groups=_merge_groups(data.get("combine") or {}),
        replace_rules=_replace_rules(data.get("replace_columns") or {}),
    )
