"""Injection-safe SQL fragment construction."""

from tableedit.sql.builder import build_filter_where_clause, build_order_by_clause
from tableedit.sql.identifiers import (
    DEFAULT_SCHEMA,
    escape_table_name,
    parse_qualified_table_name,
    validate_and_escape_identifier,
    validate_numeric,
)

__all__ = [
    "build_filter_where_clause",
    "build_order_by_clause",
    "DEFAULT_SCHEMA",
    "escape_table_name",
    "parse_qualified_table_name",
    "validate_and_escape_identifier",
    "validate_numeric",
]
