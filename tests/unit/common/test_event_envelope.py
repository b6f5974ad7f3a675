"""
Event envelope - Unit Tests
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.nats_client import Event, EventEncoder, EventType, ServiceSource

pytestmark = [pytest.mark.unit]


class TestEvent:

    def test_enum_type_and_source_are_flattened(self):
        event = Event(EventType.CREDIT_CYCLE_ISSUED, ServiceSource.CREDIT_SERVICE, {"member_id": "mem_1"})

        assert event.type == "credit.cycle_issued"
        assert event.source == "credit_service"
        assert event.id

    def test_string_type_is_kept(self):
        event = Event("freeze.completed", "freeze_service", {})
        assert event.type == "freeze.completed"

    def test_dict_round_trip_keeps_identity(self):
        event = Event("waitlist.promoted", "waitlist_service", {"entry_id": "wl_1"}, metadata={"k": "v"})

        restored = Event.from_dict(event.to_dict())

        assert restored.id == event.id
        assert restored.type == event.type
        assert restored.data == {"entry_id": "wl_1"}
        assert restored.metadata == {"k": "v"}

    def test_encoder_handles_dates_and_decimals(self):
        payload = json.dumps(
            {"fee": Decimal("40.00"), "day": date(2025, 3, 15), "at": datetime(2025, 3, 15, tzinfo=timezone.utc)},
            cls=EventEncoder,
        )

        assert json.loads(payload) == {"fee": "40.00", "day": "2025-03-15", "at": "2025-03-15T00:00:00+00:00"}
