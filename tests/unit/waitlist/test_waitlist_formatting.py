"""
Waitlist notification formatting - Unit Tests
"""

from datetime import date, time

import pytest

from microservices.waitlist_service.models import ClassSession
from microservices.waitlist_service.waitlist_service import format_session_date, format_session_time

pytestmark = [pytest.mark.unit]


class TestFormatting:

    @pytest.mark.parametrize("d, expected", [
        (date(2025, 1, 6), "Monday, January 6, 2025"),
        (date(2025, 3, 15), "Saturday, March 15, 2025"),
        (date(2024, 12, 31), "Tuesday, December 31, 2024"),
    ])
    def test_session_date(self, d, expected):
        assert format_session_date(d) == expected

    @pytest.mark.parametrize("t, expected", [
        (time(18, 30), "6:30 PM"),
        (time(6, 5), "6:05 AM"),
        (time(0, 0), "12:00 AM"),
        (time(12, 0), "12:00 PM"),
        (time(23, 59), "11:59 PM"),
    ])
    def test_session_time(self, t, expected):
        assert format_session_time(t) == expected


class TestOpenSpot:

    def _session(self, enrolled: int, capacity: int) -> ClassSession:
        return ClassSession(
            session_id="ses_1",
            session_date=date(2025, 1, 6),
            start_time=time(18, 30),
            current_enrollment=enrolled,
            max_capacity=capacity,
        )

    def test_open(self):
        assert self._session(9, 10).has_open_spot is True

    def test_full(self):
        assert self._session(10, 10).has_open_spot is False

    def test_overbooked(self):
        assert self._session(11, 10).has_open_spot is False
