"""
Freeze Service Component Test Fixtures
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import pytest

from microservices.freeze_service.freeze_service import FreezeService
from microservices.freeze_service.models import FreezeRequest, FreezeStatus
from microservices.freeze_service.protocols import DuplicateFreezeRequestError


class MockFreezeRepository:
    """In-memory FreezeRepositoryProtocol enforcing one outstanding request per member"""

    def __init__(self):
        self.freezes: Dict[str, FreezeRequest] = {}
        self.method_calls = []
        self.failing_ids: List[str] = []

    def add_freeze(self, freeze_id: str, member_id: str, status: FreezeStatus, **fields) -> FreezeRequest:
        fields.setdefault("requested_start_date", date(2025, 4, 1))
        fields.setdefault("duration_months", 1)
        fields.setdefault("requested_end_date", date(2025, 5, 1))
        fields.setdefault("freeze_year", 2025)
        fields.setdefault("freeze_fee_total", Decimal("20.00") * fields["duration_months"])
        freeze = FreezeRequest(freeze_id=freeze_id, member_id=member_id, status=status, **fields)
        self.freezes[freeze_id] = freeze
        return freeze

    async def get_freeze(self, freeze_id: str) -> Optional[FreezeRequest]:
        self.method_calls.append(("get_freeze", freeze_id))
        freeze = self.freezes.get(freeze_id)
        return freeze.model_copy() if freeze else None

    async def list_for_member_year(
        self,
        member_id: str,
        year: int,
        exclude_statuses: Sequence[FreezeStatus] = (),
    ) -> List[FreezeRequest]:
        return [
            f.model_copy() for f in self.freezes.values()
            if f.member_id == member_id and f.freeze_year == year and f.status not in exclude_statuses
        ]

    async def get_outstanding(self, member_id: str) -> Optional[FreezeRequest]:
        for f in self.freezes.values():
            if f.member_id == member_id and f.status in (FreezeStatus.PENDING, FreezeStatus.APPROVED):
                return f.model_copy()
        return None

    async def create_freeze(self, data: Dict[str, Any]) -> FreezeRequest:
        self.method_calls.append(("create_freeze", data))
        for f in self.freezes.values():
            if f.member_id == data["member_id"] and f.status in (FreezeStatus.PENDING, FreezeStatus.APPROVED):
                raise DuplicateFreezeRequestError(f"Member {data['member_id']} already has an outstanding freeze")
        freeze_id = f"frz_{uuid.uuid4().hex[:16]}"
        freeze = FreezeRequest(
            freeze_id=freeze_id,
            status=FreezeStatus.PENDING,
            created_at=datetime.now(timezone.utc),
            **data,
        )
        self.freezes[freeze_id] = freeze
        return freeze.model_copy()

    async def update_status(
        self,
        freeze_id: str,
        expected_statuses: Sequence[FreezeStatus],
        new_status: FreezeStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[FreezeRequest]:
        self.method_calls.append(("update_status", freeze_id, new_status))
        if freeze_id in self.failing_ids:
            raise RuntimeError(f"database unavailable for {freeze_id}")
        freeze = self.freezes.get(freeze_id)
        if not freeze or freeze.status not in expected_statuses:
            return None
        updated = freeze.model_copy(update={**(fields or {}), "status": new_status})
        self.freezes[freeze_id] = updated
        return updated.model_copy()

    async def list_due_expirations(self, today: date) -> List[FreezeRequest]:
        return [
            f.model_copy() for f in self.freezes.values()
            if f.status == FreezeStatus.ACTIVE and f.actual_end_date and f.actual_end_date <= today
        ]

    async def list_freezes(
        self,
        status: Optional[FreezeStatus] = None,
        member_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[FreezeRequest]:
        result = [
            f for f in self.freezes.values()
            if (status is None or f.status == status) and (member_id is None or f.member_id == member_id)
        ]
        return result[offset:offset + limit]


@pytest.fixture
def mock_repository() -> MockFreezeRepository:
    return MockFreezeRepository()


@pytest.fixture
def freeze_service(mock_repository, mock_event_bus, fixed_clock) -> FreezeService:
    return FreezeService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        clock=fixed_clock,
    )
