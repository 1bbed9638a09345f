from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""RowData model for the game data builder.

RowData represents a single data row after header parsing and coercion.
The row_number refers to the source row (4th row = 1st data row) and is
used to locate validation errors.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single typed row.

    ``values`` maps column name -> coerced cell value. The mapping itself
    stays mutable so the column rewrite pass can update cells in place.
    """
    row_number: int  # 元ファイル上の行番号 (1始まり)
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, column: str, default: Any = None) -> Any:
        return self.values.get(column, default)

    def __contains__(self, column: object) -> bool:
        return column in self.values
