"""
Billing anchor date math

A member's credits renew on the day of month their membership started.
Anniversaries that fall past the end of a short month fold onto its last day
(a member who started on Jan 31 renews on Feb 28, Apr 30, ...).
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from .models import CycleWindow

ACTIVATION_GRACE_DAYS = 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_anniversary(member_start_date: date, today: date) -> bool:
    """True when today is the member's monthly billing day"""
    effective_day = min(member_start_date.day, days_in_month(today.year, today.month))
    return today.day == effective_day


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length"""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(d.day, days_in_month(year, month)))


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max, tzinfo=timezone.utc)


def next_anniversary(cycle_start: date, anchor_day: int) -> date:
    """The billing day in the month after cycle_start, folded to month end"""
    following = add_months(cycle_start.replace(day=1), 1)
    return following.replace(day=min(anchor_day, days_in_month(following.year, following.month)))


def cycle_window(cycle_start: date, anchor_day: Optional[int] = None) -> CycleWindow:
    """
    Window for a regular cycle starting on an anniversary.

    The cycle runs up to the day before the next anniversary. anchor_day is
    the member's start day; a cycle starting on a folded day (Feb 28 for a
    Jan 31 member) still ends before the next real anchor (Mar 30, not Mar 27).
    """
    anchor_day = anchor_day or cycle_start.day
    cycle_end = next_anniversary(cycle_start, anchor_day) - timedelta(days=1)
    return CycleWindow(
        cycle_start=cycle_start,
        cycle_end=cycle_end,
        expires_at=end_of_day(cycle_end),
    )


def activation_window(start: date, grace_days: int = ACTIVATION_GRACE_DAYS) -> CycleWindow:
    """
    First cycle written at activation.

    Same cycle dates as a regular cycle, but the credits stay usable for
    grace_days after cycle_end.
    """
    window = cycle_window(start)
    return CycleWindow(
        cycle_start=window.cycle_start,
        cycle_end=window.cycle_end,
        expires_at=end_of_day(window.cycle_end + timedelta(days=grace_days)),
    )


__all__ = [
    "ACTIVATION_GRACE_DAYS",
    "days_in_month",
    "is_anniversary",
    "add_months",
    "end_of_day",
    "next_anniversary",
    "cycle_window",
    "activation_window",
]
