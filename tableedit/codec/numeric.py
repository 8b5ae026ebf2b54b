"""Numeric and boolean conversion."""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

# Display never shows more fractional digits than this
MAX_FRACTION_DIGITS = 10

TRUE_TEXT = ("1", "true")


@dataclass(frozen=True)
class NumericParseResult:
    """Parsed number; ``rounded`` is set when an integer column lost a fraction."""

    value: Union[int, Decimal]
    rounded: bool = False

    @property
    def wire_value(self) -> Union[int, float]:
        if isinstance(self.value, int):
            return self.value
        if self.value == self.value.to_integral_value() and self.value.as_tuple().exponent >= 0:
            return int(self.value)
        return float(self.value)


def parse_numeric(text: Any, is_integer: bool = False) -> Optional[NumericParseResult]:
    """
    Parse numeric user input.

    Thousands separators are stripped. On integer columns a fractional value is
    rounded half-up (away from zero on ties) and flagged as rounded; other
    columns keep their decimals.

    Returns:
        NumericParseResult, or None for empty or unparseable input
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "")
    if not cleaned or not NUMBER.match(cleaned):
        return None

    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None

    if is_integer:
        integral = number.to_integral_value(rounding=ROUND_HALF_UP)
        return NumericParseResult(value=int(integral), rounded=integral != number)

    return NumericParseResult(value=number)


def format_numeric(value: Any, is_integer: bool = False) -> str:
    """Digit-grouped display text, capped at ten fractional digits."""
    try:
        number = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        return str(value)
    if not number.is_finite():
        return str(value)

    if is_integer:
        return f"{int(number.to_integral_value(rounding=ROUND_HALF_UP)):,}"

    quantum = Decimal(1).scaleb(-MAX_FRACTION_DIGITS)
    if number.as_tuple().exponent < -MAX_FRACTION_DIGITS:
        number = number.quantize(quantum, rounding=ROUND_HALF_UP)

    text = f"{number:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_boolean(value: Any) -> Optional[bool]:
    """Tri-state boolean: None/empty is NULL, 1/'1'/true is True, anything else False."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return None
        return text in TRUE_TEXT
    return value == 1
