"""
Billing period helpers.

A period is either a calendar month written "YYYY-MM" or the one-time
"registration" obligation.

Usage:
    from payments.periods import due_date_for_month, iter_months

    for period in iter_months(date(2024, 3, 1), date(2024, 6, 15)):
        ...  # "2024-03", "2024-04", "2024-05", "2024-06"

    due_date_for_month("2024-02", due_day=31)  # date(2024, 2, 29)
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterator
from datetime import date

REGISTRATION_PERIOD = "registration"

MONTH_PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def is_month_period(period: str) -> bool:
    return bool(MONTH_PERIOD_RE.match(period or ""))


def is_valid_period(period: str) -> bool:
    return period == REGISTRATION_PERIOD or is_month_period(period)


def month_period(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_period(period: str) -> tuple[int, int]:
    """Split "YYYY-MM" into (year, month). Raises ValueError otherwise."""
    if not is_month_period(period):
        raise ValueError(f"Not a month period: {period!r}")
    year, month = period.split("-")
    return int(year), int(month)


def iter_months(start: date, end: date) -> Iterator[str]:
    """Yield month periods from start's month to end's month, inclusive."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield f"{year:04d}-{month:02d}"
        month += 1
        if month > 12:
            year, month = year + 1, 1


def due_date_for_month(period: str, due_day: int) -> date:
    """
    Due date of a month period.

    The configured day is clamped to the month's last day, so a due day
    of 31 falls on Feb 28/29, Apr 30, and so on.
    """
    year, month = parse_month_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(due_day, last_day)))
