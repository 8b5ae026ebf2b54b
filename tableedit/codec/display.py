"""Display text for raw cell values."""

from dataclasses import dataclass
from typing import Any

from tableedit.codec.kinds import ColumnKind, is_integer_type
from tableedit.codec.numeric import format_numeric, parse_boolean
from tableedit.codec.temporal import (
    format_date,
    format_time,
    format_timestamp,
    parse_date,
    parse_time,
    parse_timestamp,
)

NULL_TEXT = "NULL"
CHECKED = "☑"
UNCHECKED = "☐"
INDETERMINATE = "⊟"


@dataclass(frozen=True)
class CellDisplay:
    display: str
    semantic_class: str
    is_null: bool = False


def format_cell(value: Any, data_type: str) -> CellDisplay:
    """
    Render a raw server value for a column of the given data type.

    NULL shows as the literal ``NULL`` except on boolean columns, which show an
    indeterminate checkbox glyph. An empty string is not NULL and renders empty.
    """
    kind = ColumnKind.for_type(data_type)

    if kind is ColumnKind.BOOLEAN:
        state = parse_boolean(value)
        if state is None:
            return CellDisplay(INDETERMINATE, "boolean-null", is_null=True)
        if state:
            return CellDisplay(CHECKED, "boolean-true")
        return CellDisplay(UNCHECKED, "boolean-false")

    if value is None:
        return CellDisplay(NULL_TEXT, "null", is_null=True)

    if value == "":
        return CellDisplay("", "empty")

    if kind is ColumnKind.NUMERIC:
        return CellDisplay(format_numeric(value, is_integer_type(data_type)), "numeric")

    text = str(value)
    if kind is ColumnKind.DATE:
        parsed = parse_date(text)
        return CellDisplay(format_date(parsed) if parsed else text, "date")
    if kind is ColumnKind.TIME:
        parsed = parse_time(text.split(".")[0])
        return CellDisplay(format_time(parsed) if parsed else text, "time")
    if kind is ColumnKind.TIMESTAMP:
        parsed = parse_timestamp(text)
        return CellDisplay(format_timestamp(parsed) if parsed else text, "timestamp")

    return CellDisplay(text, "text")
