from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""ErrorRecord model for validation error reporting.

Validation never stops at the first problem: every violation becomes one
ErrorRecord. Records are printed through the logger and also written to
the JSON Lines error log (see gamedata_builder.logging.error_log).

row=0 is the sentinel for table-level errors where no single row is at
fault (e.g. a reference to a table that does not exist).
"""

__all__ = [
    "ErrorRecord",
    "TABLE_LEVEL_ROW",
]

TABLE_LEVEL_ROW = 0


@dataclass(frozen=True)
class ErrorRecord:
    """Structured validation error.

    Attributes:
        sheet: Table name the error belongs to
        row: Source row number (1-based). 0 for table-level errors
        column: Column name
        message: Human readable description
    """
    sheet: str
    row: int  # 行番号。テーブル単位のエラーは 0
    column: str
    message: str

    @property
    def is_table_level(self) -> bool:
        return self.row == TABLE_LEVEL_ROW

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format.

        Returns:
            JSON string representation without extra keys (contract enforced)
        """
        return json.dumps(asdict(self), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.sheet}:{self.column}[{self.row}]: {self.message}"
