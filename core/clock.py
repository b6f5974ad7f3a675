"""
Clock abstraction

Services take "now" from an injected clock instead of calling
datetime.now() directly, so date-dependent rules can be tested with a
fixed point in time.
"""

from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time (timezone-aware, UTC)"""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall-clock time in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


__all__ = ["Clock", "SystemClock"]
