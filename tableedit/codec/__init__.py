"""Conversion between user text, canonical storage values and display text."""

from tableedit.codec.display import CellDisplay, format_cell
from tableedit.codec.kinds import ColumnKind, ParsedInput, is_integer_type, parse_cell_input
from tableedit.codec.numeric import (
    NumericParseResult,
    format_numeric,
    parse_boolean,
    parse_numeric,
)
from tableedit.codec.temporal import (
    format_date,
    format_time,
    format_timestamp,
    parse_date,
    parse_time,
    parse_timestamp,
)

__all__ = [
    "CellDisplay",
    "format_cell",
    "ColumnKind",
    "ParsedInput",
    "is_integer_type",
    "parse_cell_input",
    "NumericParseResult",
    "format_numeric",
    "parse_boolean",
    "parse_numeric",
    "format_date",
    "format_time",
    "format_timestamp",
    "parse_date",
    "parse_time",
    "parse_timestamp",
]
