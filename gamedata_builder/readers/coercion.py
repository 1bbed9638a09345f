from __future__ import annotations

import re

from ..models.table import CellValue, ColumnKind

"""Cell value coercion: raw cell text -> typed CellValue.

Numeric coercion is strict and raises TypeCoercionError; boolean coercion
never fails (anything that is not a true literal becomes False) so that a
sloppy flag column degrades instead of aborting the whole build.
"""

__all__ = [
    "TypeCoercionError",
    "classify_type",
    "coerce_value",
    "coerce_bool",
    "coerce_float",
    "coerce_int",
]

_TYPE_TAGS: dict[str, ColumnKind] = {
    "int": ColumnKind.INTEGER,
    "integer": ColumnKind.INTEGER,
    "float": ColumnKind.FLOAT,
    "double": ColumnKind.FLOAT,
    "number": ColumnKind.FLOAT,
    "bool": ColumnKind.BOOLEAN,
    "boolean": ColumnKind.BOOLEAN,
    "string": ColumnKind.STRING,
}

TRUE_LITERALS = frozenset({"true", "1", "yes"})

_INT_RE = re.compile(r"[+-]?[0-9]+")


class TypeCoercionError(ValueError):
    """Raised when cell text cannot be parsed as the declared type."""

    def __init__(self, text: str, type_tag: str) -> None:
        self.text = text
        self.type_tag = type_tag
        super().__init__(f"cannot convert {text!r} to {type_tag}")


def classify_type(type_tag: str, *, case_sensitive: bool = True) -> ColumnKind:
    """Resolve a declared type tag; unknown tags are OPAQUE."""
    key = type_tag if case_sensitive else type_tag.lower()
    return _TYPE_TAGS.get(key, ColumnKind.OPAQUE)


def coerce_int(text: str, type_tag: str = "int") -> int:
    if not _INT_RE.fullmatch(text):
        raise TypeCoercionError(text, type_tag)
    return int(text)


def coerce_float(text: str, type_tag: str = "float") -> float:
    # float() は前後空白と "_" 区切りを許すので明示的に弾く
    if text != text.strip() or "_" in text:
        raise TypeCoercionError(text, type_tag)
    try:
        return float(text)
    except ValueError as e:
        raise TypeCoercionError(text, type_tag) from e


def coerce_bool(text: str) -> bool:
    return text.lower() in TRUE_LITERALS


def coerce_value(text: str, type_tag: str, *, case_sensitive: bool = True) -> CellValue:
    """Convert ``text`` according to ``type_tag``.

    Parameters
    ----------
    text: raw cell text (already known to be non-empty by readers)
    type_tag: declared type from the 2nd header row
    case_sensitive: False for spreadsheet sources, where ``INT`` == ``int``

    Raises
    ------
    TypeCoercionError: integer / float text that does not parse
    """
    kind = classify_type(type_tag, case_sensitive=case_sensitive)
    if kind is ColumnKind.INTEGER:
        return coerce_int(text, type_tag)
    if kind is ColumnKind.FLOAT:
        return coerce_float(text, type_tag)
    if kind is ColumnKind.BOOLEAN:
        return coerce_bool(text)
    return text
