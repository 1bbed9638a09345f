from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.table import Table
from .base import TableReader, TableReadError, build_table

"""Delimited-text (CSV) reader.

One CSV file is one table named after the file (extension removed).
Type tags are matched case-sensitively: ``INT`` is an opaque tag here.
"""

__all__ = [
    "CsvTableReader",
    "read_csv_grid",
]


def _text(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value)


def read_csv_grid(path: Path) -> list[list[str]]:
    """Read a CSV file as rows of raw cell text.

    Blank lines are kept so that grid index + 1 == file line number.
    """
    try:
        df = pd.read_csv(
            path,
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=False,
            skipinitialspace=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise TableReadError(f"malformed csv: {e}", file=path.name) from e
    return [[_text(v) for v in raw] for raw in df.itertuples(index=False, name=None)]


class CsvTableReader(TableReader):
    supported_extensions = (".csv", ".CSV")
    case_sensitive_types = True

    def read_all(self, path: Path) -> list[Table]:
        table = self.read_sheet(path)
        return [table] if table is not None else []

    def read_sheet(self, path: Path, sheet_name: str | None = None) -> Table | None:
        # CSV は単一シートなので sheet_name は無視
        grid = read_csv_grid(path)
        return build_table(
            path.stem,
            grid,
            source=path,
            case_sensitive=self.case_sensitive_types,
        )
