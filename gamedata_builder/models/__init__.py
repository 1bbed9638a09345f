"""Domain models for the game data builder.

This package contains all domain model classes used throughout the pipeline:
tables and their column descriptors, rows, validation error records,
encoded artifacts, configuration and run results.
"""

from .artifact import ConvertedArtifact
from .config_models import BuildConfig, ConverterConfig, MergeGroup, ReplaceRule
from .error_record import ErrorRecord
from .processing_result import BuildResult, FileStat
from .row_data import RowData
from .table import CellValue, Column, ColumnKind, ColumnRef, Table

__all__ = [
    # Configuration models
    "BuildConfig",
    "ConverterConfig",
    "MergeGroup",
    "ReplaceRule",
    # Table models
    "CellValue",
    "Column",
    "ColumnKind",
    "ColumnRef",
    "RowData",
    "Table",
    # Pipeline outputs
    "BuildResult",
    "ConvertedArtifact",
    "ErrorRecord",
    "FileStat",
]
