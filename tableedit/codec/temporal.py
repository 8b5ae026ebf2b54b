"""Date, time and timestamp parsing for locale-variant user input.

Parsers return None on anything they cannot read; callers decide how to
surface that. Formatters always produce the canonical storage form.
"""

import re
from datetime import date, datetime, time
from typing import Optional

from dateutil import parser as date_parser

ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DASH_DAY_FIRST = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
SLASH_MONTH_FIRST = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
TIME_12H = re.compile(
    r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(a\.?m|p\.?m|a|p)\.?$", re.IGNORECASE
)
MERIDIEM = re.compile(r"^(a\.?m|p\.?m|a|p)\.?$", re.IGNORECASE)

ISO_TIMESTAMP = re.compile(
    r"^(\d{4}-\d{1,2}-\d{1,2})[T ](\d{1,2}:\d{2}(?::\d{2})?)(?:\.\d+)?$"
)

# Free text must look like a written date before it is handed to dateutil
_WRITTEN_DATE = re.compile(r"[A-Za-z]")


def _make_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(text: str) -> Optional[date]:
    """
    Parse a user-entered date.

    Accepted, in order:
    - ISO ``YYYY-MM-DD``
    - dash day-first ``DD-MM-YYYY``
    - slash month-first ``MM/DD/YYYY``; when the first number is above 12 it is
      read day-first instead
    - written dates such as ``Feb 1, 2026`` or ``1 February 2026``

    ``2/1/2026`` is February 1st: ambiguous slash dates are month-first.
    """
    if text is None:
        return None
    trimmed = str(text).strip()
    if not trimmed:
        return None

    match = ISO_DATE.match(trimmed)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _make_date(year, month, day)

    match = DASH_DAY_FIRST.match(trimmed)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _make_date(year, month, day)

    match = SLASH_MONTH_FIRST.match(trimmed)
    if match:
        first, second, year = (int(part) for part in match.groups())
        if first <= 12:
            return _make_date(year, first, second)
        if second <= 12:
            return _make_date(year, second, first)
        return None

    if not _WRITTEN_DATE.search(trimmed):
        return None

    default = datetime(datetime.now().year, 1, 1)
    try:
        return date_parser.parse(trimmed, default=default).date()
    except (ValueError, OverflowError):
        return None


def format_date(value: date) -> str:
    """Canonical ``YYYY-MM-DD``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_time(text: str) -> Optional[time]:
    """Parse ``HH:MM[:SS]`` (24-hour) or 12-hour input with AM/PM."""
    if text is None:
        return None
    trimmed = str(text).strip()
    if not trimmed:
        return None

    match = TIME_24H.match(trimmed)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        if hours <= 23 and minutes <= 59 and seconds <= 59:
            return time(hours, minutes, seconds)
        return None

    match = TIME_12H.match(trimmed)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        is_pm = match.group(4).lower().startswith("p")
        if not 1 <= hours <= 12 or minutes > 59 or seconds > 59:
            return None
        if is_pm and hours != 12:
            hours += 12
        elif not is_pm and hours == 12:
            hours = 0
        return time(hours, minutes, seconds)

    return None


def format_time(value: time) -> str:
    """Canonical zero-padded ``HH:MM:SS``."""
    return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a date and time.

    Accepts ``YYYY-MM-DDTHH:MM[:SS]``, the same with a space, any supported date
    followed by a time (``2/1/2026 14:30``, ``Feb 1, 2026 2:30 PM``) and a bare
    date, which defaults the time to midnight.
    """
    if text is None:
        return None
    trimmed = str(text).strip()
    if not trimmed:
        return None

    match = ISO_TIMESTAMP.match(trimmed)
    if match:
        parsed_date = parse_date(match.group(1))
        parsed_time = parse_time(match.group(2))
        if parsed_date and parsed_time:
            return datetime.combine(parsed_date, parsed_time)

    parts = trimmed.split()
    if len(parts) >= 2:
        last = parts[-1]
        if len(parts) >= 3 and MERIDIEM.match(last) and ":" in parts[-2]:
            date_text = " ".join(parts[:-2])
            time_text = f"{parts[-2]} {last}"
        elif ":" in last:
            date_text = " ".join(parts[:-1])
            time_text = last
        else:
            date_text = time_text = None

        if date_text is not None:
            parsed_date = parse_date(date_text)
            parsed_time = parse_time(time_text)
            if parsed_date and parsed_time:
                return datetime.combine(parsed_date, parsed_time)

    parsed_date = parse_date(trimmed)
    if parsed_date:
        return datetime.combine(parsed_date, time(0, 0, 0))

    return None


def format_timestamp(value: datetime) -> str:
    """Canonical ``YYYY-MM-DD HH:MM:SS``."""
    return f"{format_date(value.date())} {format_time(value.time())}"
