from __future__ import annotations

import logging

from ..models.table import CellValue, Column, ColumnRef
from .coercion import TypeCoercionError, classify_type, coerce_value

"""Column metadata parser (3-row header block -> Column).

Annotation row grammar (3rd row), directives separated by ``|``:

    必填 | required          -> required=True
    选填 | optional          -> required=False
    默认:<v> | default:<v>   -> default value, coerced with the column type
    选项:<a,b> | options:<a,b> -> enumeration
    引用:<t>.<c> | ref:<t>.<c> -> foreign-key reference

Directives are evaluated left to right; a later directive of the same kind
overrides an earlier one. Unknown directives are ignored.
"""

__all__ = [
    "parse_annotation",
    "parse_column",
]

logger = logging.getLogger(__name__)

REQUIRED_MARKERS = frozenset({"必填", "required"})
OPTIONAL_MARKERS = frozenset({"选填", "optional"})
DEFAULT_PREFIXES = ("默认:", "default:")
OPTIONS_PREFIXES = ("选项:", "options:")
REF_PREFIXES = ("引用:", "ref:")


def _strip_prefix(directive: str, prefixes: tuple[str, ...]) -> str | None:
    for prefix in prefixes:
        if directive.startswith(prefix):
            return directive[len(prefix):]
    return None


def _parse_ref(text: str) -> ColumnRef | None:
    parts = text.split(".")
    if len(parts) != 2 or not all(parts):
        return None
    return ColumnRef(table=parts[0], column=parts[1])


def parse_annotation(
    annotation: str, type_tag: str, *, case_sensitive: bool = True
) -> dict[str, object]:
    """Evaluate annotation directives into Column keyword arguments."""
    fields: dict[str, object] = {}
    for raw in annotation.split("|"):
        directive = raw.strip()
        if not directive:
            continue
        if directive in REQUIRED_MARKERS:
            fields["required"] = True
            continue
        if directive in OPTIONAL_MARKERS:
            fields["required"] = False
            continue

        value = _strip_prefix(directive, DEFAULT_PREFIXES)
        if value is not None:
            default: CellValue = None
            try:
                default = coerce_value(value, type_tag, case_sensitive=case_sensitive)
            except TypeCoercionError:
                # 変換できないデフォルトは未設定扱い (エラーにしない)
                logger.debug("ignoring unparsable default %r for type %s", value, type_tag)
            fields["default"] = default
            continue

        value = _strip_prefix(directive, OPTIONS_PREFIXES)
        if value is not None:
            fields["options"] = tuple(opt.strip() for opt in value.split(","))
            continue

        value = _strip_prefix(directive, REF_PREFIXES)
        if value is not None:
            ref = _parse_ref(value.strip())
            if ref is not None:
                fields["ref"] = ref
    return fields


def parse_column(
    name: str, type_tag: str, annotation: str, *, case_sensitive: bool = True
) -> Column | None:
    """Build a Column from one header cell triple.

    Returns None for an empty header name (spacer column).
    """
    if not name:
        return None
    fields = parse_annotation(annotation, type_tag, case_sensitive=case_sensitive)
    return Column(
        name=name,
        type=type_tag,
        kind=classify_type(type_tag, case_sensitive=case_sensitive),
        comment=annotation,
        **fields,  # type: ignore[arg-type]
    )
