from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import openpyxl
import pandas as pd

from ..models.table import Table
from .base import TableReader, TableReadError, build_table

"""Spreadsheet workbook reader (pandas + openpyxl).

Every sheet is one table named after the sheet. Sheets whose name starts
with ``_`` are scratch sheets and are skipped by read_all. Type tags are
matched case-insensitively (``INT`` == ``int``).

Cells are rendered back to the text a spreadsheet shows before coercion,
so an integer stored as 3.0 reads as "3" and booleans as "true"/"false".
"""

__all__ = [
    "ExcelTableReader",
    "cell_text",
    "is_hidden_sheet",
    "read_workbook_grids",
    "workbook_sheet_names",
]

HIDDEN_SHEET_PREFIX = "_"


def is_hidden_sheet(name: str) -> bool:
    return name.startswith(HIDDEN_SHEET_PREFIX)


def cell_text(value: Any) -> str:
    """Render one raw cell value as display text ("" for empty)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _grid(df: pd.DataFrame) -> list[list[str]]:
    return [[cell_text(v) for v in raw] for raw in df.itertuples(index=False, name=None)]


def read_workbook_grids(
    path: Path, target_sheets: Iterable[str] | None = None
) -> dict[str, list[list[str]]]:
    """Read a workbook returning cell-text grids keyed by sheet name.

    Parameters
    ----------
    path: workbook path
    target_sheets: restrict to these sheet names (None = all sheets)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    grids: dict[str, list[list[str]]] = {}
    try:
        with pd.ExcelFile(path, engine="openpyxl") as xls:
            for name in xls.sheet_names:
                sheet = str(name)
                if wanted is not None and sheet not in wanted:
                    continue
                # "NA" などを NaN にしない: ゲームデータでは普通の文字列
                df = xls.parse(
                    name, header=None, dtype=object, keep_default_na=False, na_values=[]
                )
                grids[sheet] = _grid(df)
    except TableReadError:
        raise
    except Exception as e:
        raise TableReadError(f"cannot read workbook: {e}", file=path.name) from e
    return grids


def workbook_sheet_names(path: Path) -> list[str]:
    """Sheet names in workbook order, without loading any cell data."""
    try:
        wb = openpyxl.load_workbook(path, read_only=True)
    except Exception as e:
        raise TableReadError(f"cannot read workbook: {e}", file=path.name) from e
    try:
        return [str(n) for n in wb.sheetnames]
    finally:
        wb.close()


class ExcelTableReader(TableReader):
    supported_extensions = (".xlsx", ".xlsm", ".xltx", ".xltm")
    case_sensitive_types = False

    def read_all(self, path: Path) -> list[Table]:
        grids = read_workbook_grids(path)
        tables: list[Table] = []
        for sheet, grid in grids.items():
            if is_hidden_sheet(sheet):
                continue
            table = build_table(
                sheet, grid, source=path, case_sensitive=self.case_sensitive_types
            )
            if table is not None:
                tables.append(table)
        return tables

    def read_sheet(self, path: Path, sheet_name: str | None = None) -> Table | None:
        if sheet_name is None:
            visible = [n for n in workbook_sheet_names(path) if not is_hidden_sheet(n)]
            if not visible:
                return None
            sheet_name = visible[0]
        grids = read_workbook_grids(path, target_sheets=[sheet_name])
        if sheet_name not in grids:
            raise TableReadError("sheet not found", file=path.name, sheet=sheet_name)
        return build_table(
            sheet_name,
            grids[sheet_name],
            source=path,
            case_sensitive=self.case_sensitive_types,
        )
