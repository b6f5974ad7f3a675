"""
Membership Service Component Test Fixtures
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from microservices.membership_service.membership_service import MembershipService
from microservices.membership_service.models import Member, MemberStatus, MemberStatusHistory, TransitionSource


class MockMembershipRepository:
    """In-memory MembershipRepositoryProtocol with conditional status updates"""

    def __init__(self):
        self.members: Dict[str, Member] = {}
        self.history: List[MemberStatusHistory] = []
        self.method_calls = []
        self.conflict_on_update = False

    def add_member(self, member_id: str, **fields) -> Member:
        fields.setdefault("user_id", f"usr_{member_id}")
        fields.setdefault("membership_type", "Gold Membership")
        member = Member(member_id=member_id, **fields)
        self.members[member_id] = member
        return member

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get_member(self, member_id: str) -> Optional[Member]:
        self.method_calls.append(("get_member", member_id))
        member = self.members.get(member_id)
        return member.model_copy() if member else None

    async def get_member_by_subscription(self, subscription_ref: str) -> Optional[Member]:
        self.method_calls.append(("get_member_by_subscription", subscription_ref))
        for member in self.members.values():
            if member.subscription_ref == subscription_ref:
                return member.model_copy()
        return None

    async def update_status(
        self,
        member_id: str,
        expected_status: MemberStatus,
        new_status: MemberStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Member]:
        self.method_calls.append(("update_status", member_id, expected_status, new_status))
        member = self.members.get(member_id)
        if not member or member.status != expected_status:
            return None
        if self.conflict_on_update:
            # another writer got there first
            self.conflict_on_update = False
            self.members[member_id] = member.model_copy(update={"status": MemberStatus.CANCELLED})
            return None
        updated = member.model_copy(update={
            **(fields or {}),
            "status": new_status,
            "updated_at": datetime.now(timezone.utc),
        })
        self.members[member_id] = updated
        return updated.model_copy()

    async def set_annual_fee_paid(self, member_id: str, paid_at: datetime) -> Optional[Member]:
        self.method_calls.append(("set_annual_fee_paid", member_id, paid_at))
        member = self.members.get(member_id)
        if not member:
            return None
        if member.annual_fee_paid_at is None or paid_at > member.annual_fee_paid_at:
            member = member.model_copy(update={"annual_fee_paid_at": paid_at})
            self.members[member_id] = member
        return member.model_copy()

    async def add_status_history(
        self,
        member_id: str,
        from_status: Optional[MemberStatus],
        to_status: MemberStatus,
        source: str,
        reason: Optional[str] = None,
    ) -> None:
        self.history.append(MemberStatusHistory(
            history_id=f"mhist_{len(self.history) + 1}",
            member_id=member_id,
            from_status=from_status,
            to_status=to_status,
            source=TransitionSource(source),
            reason=reason,
            created_at=datetime.now(timezone.utc),
        ))

    async def get_status_history(self, member_id: str, limit: int = 50) -> List[MemberStatusHistory]:
        entries = [h for h in self.history if h.member_id == member_id]
        return list(reversed(entries))[:limit]


@pytest.fixture
def mock_repository() -> MockMembershipRepository:
    return MockMembershipRepository()


@pytest.fixture
def membership_service(mock_repository, mock_event_bus, fixed_clock) -> MembershipService:
    return MembershipService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        clock=fixed_clock,
    )


@pytest.fixture
def pending_member(mock_repository) -> Member:
    return mock_repository.add_member("mem_pending", status=MemberStatus.PENDING_ACTIVATION)


@pytest.fixture
def active_member(mock_repository) -> Member:
    return mock_repository.add_member(
        "mem_active",
        status=MemberStatus.ACTIVE,
        membership_start_date=date(2024, 6, 15),
        subscription_ref="sub_active",
        customer_ref="cus_active",
        annual_fee_paid_at=datetime(2024, 6, 15, tzinfo=timezone.utc),
    )
