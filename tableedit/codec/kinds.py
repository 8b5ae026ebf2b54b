"""Logical column kinds and their parse/format pairs."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from tableedit.codec.numeric import parse_boolean, parse_numeric
from tableedit.codec.temporal import (
    format_date,
    format_time,
    format_timestamp,
    parse_date,
    parse_time,
    parse_timestamp,
)
from tableedit.schemas.table import ColumnInfo

INTEGER_TYPES = ("TINYINT", "SMALLINT", "INTEGER", "BIGINT", "INT")
DECIMAL_TYPES = ("NUMERIC", "DECIMAL", "DOUBLE", "FLOAT", "REAL", "MONEY", "NUMBER")
BOOLEAN_TYPES = ("BIT", "BOOLEAN", "BOOL")
TIMESTAMP_TYPES = ("TIMESTAMP", "DATETIME", "POSIXTIME")


class ColumnKind(Enum):
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    TEXT = "text"

    @classmethod
    def for_type(cls, data_type: Optional[str]) -> "ColumnKind":
        """Classify a vendor data-type tag such as ``VARCHAR`` or ``TIMESTAMP``."""
        upper = (data_type or "").upper()
        if any(tag in upper for tag in BOOLEAN_TYPES):
            return cls.BOOLEAN
        if any(tag in upper for tag in TIMESTAMP_TYPES):
            return cls.TIMESTAMP
        if upper == "DATE":
            return cls.DATE
        if "TIME" in upper:
            return cls.TIME
        if is_integer_type(upper) or any(tag in upper for tag in DECIMAL_TYPES):
            return cls.NUMERIC
        return cls.TEXT

    @property
    def codec(self) -> "KindCodec":
        return CODECS[self]


def is_integer_type(data_type: Optional[str]) -> bool:
    upper = (data_type or "").upper()
    return any(tag in upper for tag in INTEGER_TYPES)


@dataclass(frozen=True)
class KindCodec:
    """Turns user text into a canonical wire value (None when unparseable)."""

    parse: Callable[[str, ColumnInfo], Any]
    hint: str


@dataclass(frozen=True)
class ParsedInput:
    """Outcome of committing text into a cell."""

    ok: bool
    value: Any = None
    rounded: bool = False
    hint: Optional[str] = None


def _date_to_wire(text: str, column: ColumnInfo) -> Optional[str]:
    parsed = parse_date(text)
    return format_date(parsed) if parsed else None


def _time_to_wire(text: str, column: ColumnInfo) -> Optional[str]:
    parsed = parse_time(text)
    return format_time(parsed) if parsed else None


def _timestamp_to_wire(text: str, column: ColumnInfo) -> Optional[str]:
    parsed = parse_timestamp(text)
    return format_timestamp(parsed) if parsed else None


def _numeric_to_wire(text: str, column: ColumnInfo):
    return parse_numeric(text, is_integer=is_integer_type(column.data_type))


def _boolean_to_wire(text: str, column: ColumnInfo) -> Optional[int]:
    parsed = parse_boolean(text)
    if parsed is None:
        return None
    return 1 if parsed else 0


def _text_to_wire(text: str, column: ColumnInfo) -> Optional[str]:
    if column.max_length is not None and len(text) > column.max_length:
        return None
    return text


CODECS: Dict[ColumnKind, KindCodec] = {
    ColumnKind.DATE: KindCodec(_date_to_wire, "Use YYYY-MM-DD, DD-MM-YYYY or MM/DD/YYYY"),
    ColumnKind.TIME: KindCodec(_time_to_wire, "Use HH:MM, HH:MM:SS or 2:30 PM"),
    ColumnKind.TIMESTAMP: KindCodec(_timestamp_to_wire, "Use YYYY-MM-DD HH:MM:SS"),
    ColumnKind.NUMERIC: KindCodec(_numeric_to_wire, "Enter a number"),
    ColumnKind.BOOLEAN: KindCodec(_boolean_to_wire, "Enter 1 or 0"),
    ColumnKind.TEXT: KindCodec(_text_to_wire, "Text is too long"),
}


def parse_cell_input(text: Optional[str], column: ColumnInfo) -> ParsedInput:
    """
    Convert committed edit text into the value sent to the server.

    Empty text stores NULL. Anything the column kind cannot read yields
    ``ok=False`` with a format hint and no value.
    """
    if text is None or text.strip() == "":
        return ParsedInput(ok=True, value=None)

    kind = ColumnKind.for_type(column.data_type)
    if kind is not ColumnKind.TEXT:
        text = text.strip()
    parsed = kind.codec.parse(text, column)

    if parsed is None:
        hint = kind.codec.hint
        if kind is ColumnKind.TEXT and column.max_length is not None:
            hint = f"Maximum length is {column.max_length} characters"
        return ParsedInput(ok=False, hint=hint)

    if kind is ColumnKind.NUMERIC:
        return ParsedInput(ok=True, value=parsed.wire_value, rounded=parsed.rounded)

    return ParsedInput(ok=True, value=parsed)
