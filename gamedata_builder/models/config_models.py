from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Config dataclasses for the game data builder.

These are the domain objects produced by gamedata_builder.config.loader;
the pipeline only ever sees these frozen values, never raw YAML.
"""

DEFAULT_FORMATS = ("json", "php", "fbs")


@dataclass(frozen=True)
class ConverterConfig:
    """Per-format encoder settings (``converters.<format>``)."""
    format: str
    enabled: bool = True
    output_path: str = ""  # output_directory 配下のサブディレクトリ
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MergeGroup:
    """One ``combine`` entry: source sheets concatenated into one table."""
    name: str
    source_sheets: tuple[str, ...]
    output_name: str
    key_column: str | None = None  # 参照用のみ (マージ処理では未使用)


@dataclass(frozen=True)
class ReplaceRule:
    """Literal substring rewrite for one column of one table."""
    table: str
    column: str
    old: str
    new: str


@dataclass(frozen=True)
class BuildConfig:
    """Root configuration object for one build run."""
    source_directory: str
    output_directory: str
    formats: tuple[str, ...] = DEFAULT_FORMATS
    async_encode: bool = False
    fast_mode: bool = False
    sync_to_game: bool = False
    game_directory: str | None = None
    log_directory: str = "./logs"
    converters: dict[str, ConverterConfig] = field(default_factory=dict)
    merge_groups: tuple[MergeGroup, ...] = ()
    replace_rules: tuple[ReplaceRule, ...] = ()

    def converter(self, fmt: str) -> ConverterConfig:
        """Settings for ``fmt``; formats without an entry use defaults."""
        return self.converters.get(fmt) or ConverterConfig(format=fmt)

    @property
    def enabled_formats(self) -> list[str]:
        """Formats to encode, in configured order."""
        return [f for f in self.formats if self.converter(f).enabled]
