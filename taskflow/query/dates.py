"""
Date expressions for the query language.

Supported values:

- absolute dates: ``2025-01-15``, ``2025/01/15``
- keywords: ``today``, ``tomorrow``, ``yesterday`` and ``none``
- offsets from now: ``7d``, ``+2w``, ``-1M`` (days, weeks, calendar months)
- ranges for the ``:`` operator: ``2025-01-01..2025-01-31``, ``today..+7d``

Keywords and offsets are evaluated against ``now``, which callers may pin
for a whole conversion so every clause sees the same instant.
"""

from datetime import datetime, timedelta
import logging
import re
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from .errors import DateExpressionError

logger = logging.getLogger(__name__)

NONE_SPECIAL = "none"

SQL_FORMAT = "%Y-%m-%d %H:%M:%S"
DISPLAY_FORMAT = "%Y-%m-%d"

_ABSOLUTE_FORMATS = {"-": "%Y-%m-%d", "/": "%Y/%m/%d"}
_ABSOLUTE_PATTERN = re.compile(r"[0-9]{4}([-/])[0-9]{2}\1[0-9]{2}")
_OFFSET_PATTERN = re.compile(r"([+-]?)([0-9]+)([dwM])")
_RANGE_SEPARATOR = ".."
_OPERATORS = (":", "<", ">")


def start_of_day(moment: datetime) -> datetime:
    """Return midnight of the same date."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Return the last representable instant of the same date."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def format_date_for_sql(moment: datetime) -> str:
    return moment.strftime(SQL_FORMAT)


def format_date_for_display(moment: datetime) -> str:
    return moment.strftime(DISPLAY_FORMAT)


def _parse_keyword(value: str, now: datetime) -> Optional[datetime]:
    today = start_of_day(now)
    if value == "today":
        return today
    if value == "tomorrow":
        return today + timedelta(days=1)
    if value == "yesterday":
        return today - timedelta(days=1)
    return None


def _parse_offset(value: str, now: datetime) -> Optional[datetime]:
    match = _OFFSET_PATTERN.fullmatch(value)
    if not match:
        return None

    sign, digits, unit = match.groups()
    try:
        amount = -int(digits) if sign == "-" else int(digits)
        if unit == "d":
            result = now + timedelta(days=amount)
        elif unit == "w":
            result = now + timedelta(weeks=amount)
        else:
            # relativedelta clamps Jan 31 + 1M to the last day of February
            result = now + relativedelta(months=amount)
    except (OverflowError, ValueError):
        raise DateExpressionError(f"date offset out of range: '{value}'") from None

    return start_of_day(result)


def _parse_absolute(value: str) -> Optional[datetime]:
    # strptime alone would accept unpadded fields such as 2025-1-5
    match = _ABSOLUTE_PATTERN.fullmatch(value)
    if not match:
        return None
    try:
        return datetime.strptime(value, _ABSOLUTE_FORMATS[match.group(1)])
    except ValueError:
        return None


def parse_date(text: str, now: Optional[datetime] = None) -> Tuple[Optional[datetime], str]:
    """
    Evaluate a single date expression.

    Args:
        text: Absolute date, keyword or relative offset
        now: Reference instant for keywords and offsets (default: current time)

    Returns:
        Tuple of (instant, special). ``special`` is ``"none"`` with a None
        instant for the ``none`` keyword, otherwise an empty string.

    Raises:
        DateExpressionError: If the expression is not recognized
    """
    value = (text or "").strip()
    if now is None:
        now = datetime.now()

    lowered = value.lower()
    if lowered == NONE_SPECIAL:
        return None, NONE_SPECIAL

    moment = _parse_keyword(lowered, now)
    if moment is None:
        # Units are case sensitive: "M" is months, "m" is rejected
        moment = _parse_offset(value, now)
    if moment is None:
        moment = _parse_absolute(value)
    if moment is None:
        raise DateExpressionError(
            f"unrecognized date expression: '{value}' "
            "(expected YYYY-MM-DD, today, tomorrow, yesterday, none, or an offset like +7d, -2w, +1M)"
        )

    return moment, ""


def _parse_bound(text: str, now: datetime, side: str) -> datetime:
    moment, special = parse_date(text, now)
    if special == NONE_SPECIAL:
        raise DateExpressionError(f"'none' cannot be used as the {side} of a date range")
    return moment


def parse_date_range(
    value: str, operator: str = ":", now: Optional[datetime] = None
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Evaluate a date clause into an inclusive (start, end) window.

    Args:
        value: Date expression, or ``A..B`` for the ``:`` operator
        operator: ``:`` (on / between), ``<`` (on or before), ``>`` (on or after)
        now: Reference instant for keywords and offsets (default: current time)

    Returns:
        Tuple of (start, end); either may be None for open-ended windows.
        Both are None when the value is ``none``.

    Raises:
        DateExpressionError: On an unknown operator, a malformed range or an
            unrecognized date expression
    """
    if operator not in _OPERATORS:
        raise DateExpressionError(f"unsupported date operator: '{operator}' (expected :, < or >)")

    if now is None:
        now = datetime.now()

    value = (value or "").strip()

    if _RANGE_SEPARATOR in value:
        if operator != ":":
            raise DateExpressionError(f"range '{value}' can only be used with ':'")

        parts = value.split(_RANGE_SEPARATOR)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise DateExpressionError(f"invalid range syntax: '{value}' (expected A..B)")

        start = start_of_day(_parse_bound(parts[0], now, "start"))
        end = end_of_day(_parse_bound(parts[1], now, "end"))
        if start > end:
            raise DateExpressionError(f"range start is after range end: '{value}'")

        logger.debug("Date range %r evaluated to %s .. %s", value, start, end)
        return start, end

    moment, special = parse_date(value, now)
    if special == NONE_SPECIAL:
        return None, None

    if operator == "<":
        return None, end_of_day(moment)
    if operator == ">":
        return start_of_day(moment), None
    return start_of_day(moment), end_of_day(moment)
