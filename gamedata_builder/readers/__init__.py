"""Table readers and the extension -> reader table.

The reader set is closed: CSV and spreadsheet workbooks. Extensions are
matched case-sensitively (``.CSV`` is listed explicitly, ``.XLSX`` is not).
"""

from __future__ import annotations

from pathlib import Path

from .base import TableReader, TableReadError, build_table
from .coercion import TypeCoercionError, classify_type, coerce_value
from .csv_reader import CsvTableReader
from .excel_reader import ExcelTableReader
from .metadata import parse_column

__all__ = [
    "READERS",
    "SUPPORTED_EXTENSIONS",
    "CsvTableReader",
    "ExcelTableReader",
    "TableReadError",
    "TableReader",
    "TypeCoercionError",
    "build_table",
    "classify_type",
    "coerce_value",
    "parse_column",
    "reader_for",
]

READERS: dict[str, type[TableReader]] = {
    ext: reader_cls
    for reader_cls in (CsvTableReader, ExcelTableReader)
    for ext in reader_cls.supported_extensions
}

SUPPORTED_EXTENSIONS = frozenset(READERS)


def reader_for(path: Path) -> TableReader | None:
    """Reader instance for ``path``; None for unsupported extensions."""
    reader_cls = READERS.get(path.suffix)
    return reader_cls() if reader_cls is not None else None
