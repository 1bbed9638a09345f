from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from dotenv import load_dotenv

from gamedata_builder.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from gamedata_builder.logging.init import log_summary, set_debug, setup_logging
from gamedata_builder.models.config_models import BuildConfig
from gamedata_builder.readers import TableReadError, reader_for
from gamedata_builder.services.orchestrator import (
    ProcessingError,
    ValidationFailedError,
    process_all,
    scan_source_files,
)
from gamedata_builder.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (directory overrides) and the YAML config
- Apply command-line overrides (--fast / --async)
- Run the build and print the SUMMARY line

Exit codes: 0 success, 1 fatal error, 2 validation failed.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_VALIDATION_FAILED = 2

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存環境変数を上書き
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="gamedata-builder",
        description="Convert CSV / Excel game data tables into json, php and FlatBuffers",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the build config (default: {DEFAULT_CONFIG_PATH})",
    )
    p.add_argument("--fast", action="store_true", help="Skip sources whose artifacts are up to date")
    p.add_argument(
        "--async", dest="async_encode", action="store_true", help="Encode all formats concurrently"
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print table columns & first rows then exit"
    )
    return p.parse_args(argv)


def _apply_overrides(cfg: BuildConfig, args: argparse.Namespace) -> BuildConfig:
    changes = {}
    if args.fast:
        changes["fast_mode"] = True
    if args.async_encode:
        changes["async_encode"] = True
    return dataclasses.replace(cfg, **changes) if changes else cfg


def _inspect_data(cfg: BuildConfig) -> int:
    try:
        files = scan_source_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no table files")
        return EXIT_SUCCESS
    for f in files:
        print(f"FILE: {f.name}")
        reader = reader_for(f)
        if reader is None:  # pragma: no cover
            continue
        try:
            tables = reader.read_all(f)
        except TableReadError as e:
            print(f"  read_error: {e}")
            continue
        for table in tables:
            cols = [f"{c.name}:{c.type}" for c in table.columns]
            print(f"  TABLE: {table.name} rows={len(table)} cols={cols}")
            sample = [dict(r.values) for r in table.rows[:INSPECT_SAMPLE_ROWS]]
            print("    sample_rows=", sample)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    cfg = _apply_overrides(cfg, args)

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Building tables from: {cfg.source_directory}")
    try:
        result = process_all(cfg)
    except ValidationFailedError as e:
        where = f" (see {e.log_path})" if e.log_path else ""
        logger.error(f"validation: {len(e.errors)} errors{where}")
        return EXIT_VALIDATION_FAILED
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " ラベルを付けるので除去
    log_summary(summary_line.removeprefix("SUMMARY "))
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
