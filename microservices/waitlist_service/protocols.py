"""
Waitlist Service Protocols

Interfaces for the repository and HTTP collaborators.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .models import ClassSession, WaitlistEntry


@runtime_checkable
class WaitlistRepositoryProtocol(Protocol):
    """Repository interface for sessions and waitlist entries"""

    async def get_session(self, session_id: str) -> Optional[ClassSession]:
        ...

    async def get_next_waiting(
        self,
        session_id: str,
        exclude_entry_ids: Sequence[str] = (),
    ) -> Optional[WaitlistEntry]:
        """Lowest-position waiting entry, ordered in the query"""
        ...

    async def mark_notified(
        self,
        entry_id: str,
        notified_at: datetime,
        claim_expires_at: datetime,
    ) -> Optional[WaitlistEntry]:
        """
        waiting -> notified for one row.

        Returns None when the row was no longer waiting.
        """
        ...

    async def list_expired_claims(self, now: datetime) -> List[WaitlistEntry]:
        """Notified entries with claim_expires_at < now"""
        ...

    async def mark_expired(self, entry_id: str) -> Optional[WaitlistEntry]:
        """notified -> expired; None when the entry was claimed meanwhile"""
        ...

    async def list_entries(self, session_id: str) -> List[WaitlistEntry]:
        ...


@runtime_checkable
class AccountClientProtocol(Protocol):
    async def get_user_email(self, user_id: str) -> Optional[str]:
        ...


@runtime_checkable
class NotificationClientProtocol(Protocol):
    async def send(self, notification_type: str, to: str, data: Dict[str, Any]) -> bool:
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    async def publish_event(self, event: Any) -> bool:
        ...


# ====================
# Custom Exceptions
# ====================


class WaitlistServiceError(Exception):
    """Base exception for waitlist service errors"""
    pass


class SessionNotFoundError(WaitlistServiceError):
    """Raised when the class session does not exist"""
    pass


__all__ = [
    "WaitlistRepositoryProtocol",
    "AccountClientProtocol",
    "NotificationClientProtocol",
    "EventBusProtocol",
    "WaitlistServiceError",
    "SessionNotFoundError",
]
