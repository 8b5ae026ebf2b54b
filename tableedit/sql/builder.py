"""WHERE and ORDER BY fragments built from structured filter and sort input.

Both builders are gated by the table schema: a column the schema does not
contain never reaches the SQL text.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from tableedit.schemas.table import FilterCriterion, TableSchema
from tableedit.sql.identifiers import validate_and_escape_identifier

logger = logging.getLogger(__name__)

# User-facing wildcards and their LIKE equivalents
WILDCARDS = {"*": "%", "?": "_"}
LIKE_ESCAPE = "\\"


def _to_like_pattern(value: str) -> str:
    """Escape literal LIKE metacharacters, then translate user wildcards."""
    pattern = []
    for char in value:
        if char in ("%", "_", LIKE_ESCAPE):
            pattern.append(LIKE_ESCAPE + char)
        else:
            pattern.append(WILDCARDS.get(char, char))
    return "".join(pattern)


def build_filter_where_clause(
    filters: Iterable[FilterCriterion], schema: TableSchema
) -> Tuple[str, List[str]]:
    """
    Build a parameterized WHERE clause from column filters.

    Each usable filter becomes ``"Col" LIKE ?`` and filters are AND-joined.
    ``*`` matches any run of characters and ``?`` a single character; when a
    wildcard is present the literal ``%``/``_`` are escaped and an ESCAPE clause
    is appended. Filters on unknown columns or with blank values are dropped.

    Args:
        filters: Filter criteria as typed by the user
        schema: Schema of the table being filtered

    Returns:
        Tuple of (where_clause, params); both empty when nothing applies
    """
    valid_columns = set(schema.column_names)
    conditions: List[str] = []
    params: List[str] = []

    for criterion in filters or ():
        if criterion.column not in valid_columns:
            logger.warning(f"Filter ignored: unknown column {criterion.column!r}")
            continue

        value = criterion.value.strip()
        if not value:
            continue

        escaped_column = validate_and_escape_identifier(criterion.column, "filter column")

        if any(wildcard in value for wildcard in WILDCARDS):
            conditions.append(f"{escaped_column} LIKE ? ESCAPE '{LIKE_ESCAPE}'")
            params.append(_to_like_pattern(value))
        else:
            conditions.append(f"{escaped_column} LIKE ?")
            params.append(value)

    if not conditions:
        return "", []

    return "WHERE " + " AND ".join(conditions), params


def build_order_by_clause(
    column: Optional[str], direction: Optional[str], schema: TableSchema
) -> str:
    """Build ``ORDER BY "Col" ASC|DESC``, or an empty string when unsorted."""
    if not column or not direction:
        return ""

    if column not in set(schema.column_names):
        logger.warning(f"Sort ignored: unknown column {column!r}")
        return ""

    escaped_column = validate_and_escape_identifier(column, "sort column")
    keyword = "DESC" if direction.lower() == "desc" else "ASC"
    return f"ORDER BY {escaped_column} {keyword}"
