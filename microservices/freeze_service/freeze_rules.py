"""
Freeze rules

Yearly allowance: at most 2 freeze months and at most 2 freezes per
freeze_year, and no new request while one is pending or approved.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Iterable

from .models import FreezeEligibility, FreezeRequest, FreezeStatus

MAX_FREEZE_MONTHS_PER_YEAR = 2
MAX_FREEZES_PER_YEAR = 2
ALLOWED_DURATIONS = (1, 2)
FREEZE_FEE_PER_MONTH = Decimal("20.00")

OUTSTANDING_STATUSES = (FreezeStatus.PENDING, FreezeStatus.APPROVED)
USED_STATUSES = (FreezeStatus.ACTIVE, FreezeStatus.COMPLETED)
EXCLUDED_STATUSES = (FreezeStatus.REJECTED, FreezeStatus.CANCELLED)
TERMINAL_STATUSES = (FreezeStatus.REJECTED, FreezeStatus.COMPLETED, FreezeStatus.CANCELLED)


def compute_eligibility(freezes: Iterable[FreezeRequest]) -> FreezeEligibility:
    """
    Eligibility from one year's freeze requests.

    Rejected and cancelled requests are ignored even if present.
    """
    counted = [f for f in freezes if f.status not in EXCLUDED_STATUSES]

    has_pending = any(f.status in OUTSTANDING_STATUSES for f in counted)
    used = [f for f in counted if f.status in USED_STATUSES]
    months_used = sum(f.duration_months for f in used)
    months_remaining = max(0, MAX_FREEZE_MONTHS_PER_YEAR - months_used)
    freezes_used = len(used)

    return FreezeEligibility(
        can_freeze=months_remaining > 0 and not has_pending and freezes_used < MAX_FREEZES_PER_YEAR,
        months_used=months_used,
        months_remaining=months_remaining,
        has_pending=has_pending,
        freezes_used=freezes_used,
    )


def freeze_end_date(start: date, duration_months: int) -> date:
    """End of a freeze period: start plus whole months (day clamped)"""
    month_index = start.month - 1 + duration_months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(start.day, calendar.monthrange(year, month)[1]))


def freeze_fee_total(duration_months: int) -> Decimal:
    return FREEZE_FEE_PER_MONTH * duration_months


__all__ = [
    "MAX_FREEZE_MONTHS_PER_YEAR",
    "MAX_FREEZES_PER_YEAR",
    "ALLOWED_DURATIONS",
    "FREEZE_FEE_PER_MONTH",
    "OUTSTANDING_STATUSES",
    "USED_STATUSES",
    "EXCLUDED_STATUSES",
    "TERMINAL_STATUSES",
    "compute_eligibility",
    "freeze_end_date",
    "freeze_fee_total",
]
