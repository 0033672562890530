"""Calendar helpers for day and month keys.

Dates are plain ``datetime.date`` values in local time. Day keys are
``YYYY-MM-DD`` strings and month keys are ``YYYY-MM`` strings.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

MONTH_KEY_RE = re.compile(r"\d{4}-\d{2}")

WEEKDAY_SHORT = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def pad2(n: int) -> str:
    return f"{n:02d}"


def to_iso_date(d: date) -> str:
    """Format a date as a ``YYYY-MM-DD`` day key."""
    return f"{d.year}-{pad2(d.month)}-{pad2(d.day)}"


def month_key_of(d: date) -> str:
    """Return the ``YYYY-MM`` month key containing ``d``."""
    return f"{d.year}-{pad2(d.month)}"


def is_month_key(value: str | None) -> bool:
    return bool(value) and MONTH_KEY_RE.fullmatch(value) is not None


def parse_month_key(month_key: str) -> date | None:
    """Return the first day of the month, or None for a malformed key."""
    if not is_month_key(month_key):
        return None
    year, month = (int(part) for part in month_key.split("-"))
    if not 1 <= month <= 12 or year < 1:
        return None
    return date(year, month, 1)


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=days_in_month(d))


def add_months(d: date, delta: int) -> date:
    """Return the first day of the month ``delta`` months away from ``d``."""
    index = d.year * 12 + (d.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def days_in_month(d: date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def days_in_month_from_key(month_key: str) -> int:
    """Number of calendar days in a month key (28-31).

    A malformed key falls back to 30 days.
    """
    first = parse_month_key(month_key)
    if first is None:
        return 30
    return days_in_month(first)


def month_days(month: date | str) -> list[date]:
    """All days of the month, from the 1st to the last day."""
    first = parse_month_key(month) if isinstance(month, str) else start_of_month(month)
    if first is None:
        return []
    return [first.replace(day=day) for day in range(1, days_in_month(first) + 1)]


def weekday_index_mon0(d: date) -> int:
    """Monday=0 ... Sunday=6."""
    return d.weekday()


def yesterday_iso(today: date | None = None) -> str:
    today = today or date.today()
    return to_iso_date(today - timedelta(days=1))
