"""
Credit Service Component Test Fixtures

- MockCreditRepository: in-memory CreditRepositoryProtocol that honours the
  (member_id, credit_type, cycle_start) uniqueness of the real table
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Set

import pytest

from microservices.credit_service.credit_service import CreditService


class MockCreditRepository:
    """In-memory credit grants and active member rows"""

    def __init__(self):
        self.members: List[Dict[str, Any]] = []
        self.grants: List[Dict[str, Any]] = []
        self.failing_members: Set[str] = set()
        self.method_calls = []

    def add_member(
        self,
        member_id: str,
        membership_type: Optional[str],
        start_date: date,
        user_id: Optional[str] = None,
    ):
        self.members.append({
            "member_id": member_id,
            "user_id": user_id or f"usr_{member_id}",
            "membership_type": membership_type,
            "membership_start_date": start_date,
        })

    def fail_for(self, member_id: str):
        """Make insert_grants raise for member_id"""
        self.failing_members.add(member_id)

    def grants_for(self, member_id: str) -> List[Dict[str, Any]]:
        return [g for g in self.grants if g["member_id"] == member_id]

    async def list_active_members(self) -> List[Dict[str, Any]]:
        self.method_calls.append(("list_active_members",))
        return [dict(m) for m in self.members]

    async def get_existing_credit_types(self, member_id: str, cycle_start: date) -> List[str]:
        self.method_calls.append(("get_existing_credit_types", member_id, cycle_start))
        return [
            g["credit_type"] for g in self.grants
            if g["member_id"] == member_id and g["cycle_start"] == cycle_start
        ]

    async def insert_grants(self, grants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.method_calls.append(("insert_grants", grants))
        if grants and grants[0]["member_id"] in self.failing_members:
            raise RuntimeError("connection reset by peer")

        inserted = []
        for grant in grants:
            key = (grant["member_id"], grant["credit_type"], grant["cycle_start"])
            if any((g["member_id"], g["credit_type"], g["cycle_start"]) == key for g in self.grants):
                continue
            row = {
                **grant,
                "grant_id": f"grant_{uuid.uuid4().hex[:16]}",
                "created_at": datetime.now(timezone.utc),
            }
            self.grants.append(row)
            inserted.append(dict(row))
        return inserted

    async def get_member_credits(self, member_id: str, as_of: datetime) -> List[Dict[str, Any]]:
        self.method_calls.append(("get_member_credits", member_id, as_of))
        return [dict(g) for g in self.grants if g["member_id"] == member_id and g["expires_at"] >= as_of]


@pytest.fixture
def mock_repository() -> MockCreditRepository:
    return MockCreditRepository()


@pytest.fixture
def credit_service(mock_repository, mock_event_bus, fixed_clock) -> CreditService:
    return CreditService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        clock=fixed_clock,
    )
