"""Identifier validation and escaping.

Nothing is interpolated into SQL text unless it went through this module first.
Values always travel as ``?`` parameters; only identifiers and paging numbers are
ever written into the statement itself.
"""

import re
from typing import Tuple

from tableedit.core.exceptions import InvalidIdentifierError, InvalidNumericError

# Vendor identifiers may start with % (e.g. %ID, %Dictionary)
VALID_IDENTIFIER = re.compile(r"^[A-Za-z0-9_%]+$")

# Schema assumed for unqualified table names
DEFAULT_SCHEMA = "SQLUser"


def validate_and_escape_identifier(name: str, role: str) -> str:
    """Validate an identifier and return it as a delimited identifier.

    Args:
        name: Table, schema or column name
        role: What the identifier is, used in the error message

    Returns:
        The identifier wrapped in double quotes

    Raises:
        InvalidIdentifierError: if the name is empty or outside the grammar
    """
    if not isinstance(name, str) or not name:
        raise InvalidIdentifierError(role, name, "identifier cannot be empty")

    if not VALID_IDENTIFIER.match(name):
        raise InvalidIdentifierError(
            role, name, f'"{name}" contains invalid characters'
        )

    return f'"{name}"'


def parse_qualified_table_name(qualified_name: str) -> Tuple[str, str]:
    """Split ``Schema.Table`` on the first dot.

    ``"Ens_Lib.MessageHeader"`` gives ``("Ens_Lib", "MessageHeader")``;
    ``"MessageHeader"`` gives ``("SQLUser", "MessageHeader")``.
    """
    schema_name, dot, base_name = qualified_name.partition(".")
    if dot and schema_name:
        return schema_name, base_name
    return DEFAULT_SCHEMA, qualified_name


def escape_table_name(qualified_name: str) -> str:
    """Return ``"Schema"."Table"`` for a qualified or bare table name."""
    schema_name, base_name = parse_qualified_table_name(qualified_name)
    escaped_schema = validate_and_escape_identifier(schema_name, "schema name")
    escaped_base = validate_and_escape_identifier(base_name, "table name")
    return f"{escaped_schema}.{escaped_base}"


def validate_numeric(value: int, role: str) -> int:
    """Accept only non-negative integers (page size, offset)."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidNumericError(role, value)
    return value
