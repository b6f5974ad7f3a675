"""
Waitlist Service Component Test Fixtures
"""

from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence

import pytest

from microservices.waitlist_service.models import ClassSession, WaitlistEntry, WaitlistStatus
from microservices.waitlist_service.waitlist_service import WaitlistService


class MockWaitlistRepository:
    """
    In-memory WaitlistRepositoryProtocol.

    steal_claims names entries that a concurrent promotion claims between
    get_next_waiting and mark_notified.
    """

    def __init__(self):
        self.sessions: Dict[str, ClassSession] = {}
        self.entries: Dict[str, WaitlistEntry] = {}
        self.steal_claims: List[str] = []
        self.method_calls = []

    def add_session(
        self,
        session_id: str,
        current_enrollment: int = 9,
        max_capacity: int = 10,
        class_name: Optional[str] = "Yoga Flow",
    ) -> ClassSession:
        session = ClassSession(
            session_id=session_id,
            class_name=class_name,
            session_date=date(2025, 1, 6),
            start_time=time(18, 30),
            current_enrollment=current_enrollment,
            max_capacity=max_capacity,
        )
        self.sessions[session_id] = session
        return session

    def add_entry(self, entry_id: str, session_id: str, user_id: str, position: int, **fields) -> WaitlistEntry:
        entry = WaitlistEntry(
            entry_id=entry_id,
            session_id=session_id,
            user_id=user_id,
            position=position,
            **fields,
        )
        self.entries[entry_id] = entry
        return entry

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get_session(self, session_id: str) -> Optional[ClassSession]:
        self.method_calls.append(("get_session", session_id))
        return self.sessions.get(session_id)

    async def get_next_waiting(self, session_id: str, exclude_entry_ids: Sequence[str] = ()) -> Optional[WaitlistEntry]:
        self.method_calls.append(("get_next_waiting", session_id, list(exclude_entry_ids)))
        waiting = sorted(
            (e for e in self.entries.values()
             if e.session_id == session_id
             and e.status == WaitlistStatus.WAITING
             and e.entry_id not in exclude_entry_ids),
            key=lambda e: e.position,
        )
        return waiting[0].model_copy() if waiting else None

    async def mark_notified(
        self,
        entry_id: str,
        notified_at: datetime,
        claim_expires_at: datetime,
    ) -> Optional[WaitlistEntry]:
        self.method_calls.append(("mark_notified", entry_id))
        entry = self.entries.get(entry_id)
        if entry_id in self.steal_claims and entry is not None:
            self.entries[entry_id] = entry.model_copy(update={"status": WaitlistStatus.NOTIFIED})
            return None
        if not entry or entry.status != WaitlistStatus.WAITING:
            return None
        updated = entry.model_copy(update={
            "status": WaitlistStatus.NOTIFIED,
            "notified_at": notified_at,
            "claim_expires_at": claim_expires_at,
        })
        self.entries[entry_id] = updated
        return updated.model_copy()

    async def list_expired_claims(self, now: datetime) -> List[WaitlistEntry]:
        return sorted(
            (e.model_copy() for e in self.entries.values()
             if e.status == WaitlistStatus.NOTIFIED and e.claim_expires_at and e.claim_expires_at < now),
            key=lambda e: e.claim_expires_at,
        )

    async def mark_expired(self, entry_id: str) -> Optional[WaitlistEntry]:
        self.method_calls.append(("mark_expired", entry_id))
        entry = self.entries.get(entry_id)
        if not entry or entry.status != WaitlistStatus.NOTIFIED:
            return None
        updated = entry.model_copy(update={"status": WaitlistStatus.EXPIRED})
        self.entries[entry_id] = updated
        return updated.model_copy()

    async def list_entries(self, session_id: str) -> List[WaitlistEntry]:
        return sorted(
            (e for e in self.entries.values() if e.session_id == session_id),
            key=lambda e: e.position,
        )


@pytest.fixture
def mock_repository() -> MockWaitlistRepository:
    return MockWaitlistRepository()


@pytest.fixture
def waitlist_service(
    mock_repository,
    mock_account_client,
    mock_notification_client,
    mock_event_bus,
    fixed_clock,
) -> WaitlistService:
    return WaitlistService(
        repository=mock_repository,
        account_client=mock_account_client,
        notification_client=mock_notification_client,
        event_bus=mock_event_bus,
        clock=fixed_clock,
    )
