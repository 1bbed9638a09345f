from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from ..models.config_models import BuildConfig, MergeGroup, ReplaceRule
from ..models.table import Table

"""Cross-table transformations: sheet merge and column value rewrite.

Both passes are driven by configuration (``combine`` / ``replace_columns``)
and run after every source file has been read, before validation.

merge:   rows of several source tables concatenated (source order) into one
         new table that takes the first source's columns; sources removed.
rewrite: literal substring replacement in string cells of one column.
"""

__all__ = [
    "DuplicateTableError",
    "apply_merges",
    "apply_replacements",
    "ensure_unique_names",
    "merge_tables",
    "transform",
]

logger = logging.getLogger(__name__)


class DuplicateTableError(Exception):
    """Raised when two tables share a name after transformation."""


def merge_tables(output_name: str, sources: Sequence[Table]) -> Table:
    """Concatenate ``sources`` into a new table named ``output_name``.

    Column compatibility across sources is not checked; the first source's
    column list is used as-is.
    """
    merged = Table(name=output_name, columns=list(sources[0].columns))
    for source in sources:
        merged.rows.extend(source.rows)
    return merged


def apply_merges(tables: Sequence[Table], groups: Iterable[MergeGroup]) -> list[Table]:
    """Apply merge groups in order; returns the new table collection.

    A group with any missing source table is skipped as a whole. The merged
    table takes the position of its first source. A source listed more than
    once is merged once.
    """
    result = list(tables)
    for group in groups:
        source_names = list(dict.fromkeys(group.source_sheets))
        if len(source_names) != len(group.source_sheets):
            logger.warning("merge %s lists a source sheet twice: %s", group.name, list(group.source_sheets))
        by_name = {t.name: t for t in result}
        missing = [s for s in source_names if s not in by_name]
        if not source_names or missing:
            logger.warning(
                "merge %s skipped: missing source sheets %s", group.name, missing
            )
            continue
        sources = [by_name[s] for s in source_names]
        merged = merge_tables(group.output_name, sources)
        source_ids = {id(t) for t in sources}
        first_index = next(i for i, t in enumerate(result) if id(t) in source_ids)
        remaining = [t for t in result if id(t) not in source_ids]
        remaining.insert(min(first_index, len(remaining)), merged)
        result = remaining
        logger.info(
            "merged %s -> %s rows=%d", source_names, group.output_name, len(merged.rows)
        )
    return result


def apply_replacements(tables: Sequence[Table], rules: Iterable[ReplaceRule]) -> int:
    """Rewrite string cells in place. Returns the number of changed cells."""
    by_name = {t.name: t for t in tables}
    changed = 0
    for rule in rules:
        table = by_name.get(rule.table)
        if table is None:
            logger.debug("replace rule for unknown table %s ignored", rule.table)
            continue
        for row in table.rows:
            value = row.values.get(rule.column)
            # 文字列以外は変換しない
            if not isinstance(value, str):
                continue
            replaced = value.replace(rule.old, rule.new)
            if replaced != value:
                row.values[rule.column] = replaced
                changed += 1
    return changed


def ensure_unique_names(tables: Sequence[Table]) -> None:
    counts = Counter(t.name for t in tables)
    duplicates = sorted(name for name, n in counts.items() if n > 1)
    if duplicates:
        raise DuplicateTableError(f"duplicate table names: {duplicates}")


def transform(tables: Sequence[Table], config: BuildConfig) -> list[Table]:
    """Run merge then rewrite, then check name uniqueness."""
    result = apply_merges(tables, config.merge_groups)
    changed = apply_replacements(result, config.replace_rules)
    if changed:
        logger.debug("column rewrite changed %d cells", changed)
    ensure_unique_names(result)
    return result
