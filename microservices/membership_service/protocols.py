"""
Membership Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Member, MemberStatus, MemberStatusHistory


# ====================
# Repository Protocol
# ====================


class MembershipRepositoryProtocol(Protocol):
    """Protocol for membership data repository"""

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def get_member(self, member_id: str) -> Optional["Member"]:
        """Get member by ID"""
        ...

    async def get_member_by_subscription(self, subscription_ref: str) -> Optional["Member"]:
        """Get member by payment processor subscription ID"""
        ...

    async def update_status(
        self,
        member_id: str,
        expected_status: "MemberStatus",
        new_status: "MemberStatus",
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional["Member"]:
        """
        Conditionally change status.

        Only applies when the stored status still equals expected_status.
        Returns the updated member, or None when the row changed underneath.
        """
        ...

    async def set_annual_fee_paid(self, member_id: str, paid_at: datetime) -> Optional["Member"]:
        """Move annual_fee_paid_at forward to paid_at; never clears it or moves it back"""
        ...

    async def add_status_history(
        self,
        member_id: str,
        from_status: Optional["MemberStatus"],
        to_status: "MemberStatus",
        source: str,
        reason: Optional[str] = None,
    ) -> None:
        """Record a status change"""
        ...

    async def get_status_history(self, member_id: str, limit: int = 50) -> List["MemberStatusHistory"]:
        """Most recent status changes first"""
        ...


class EventBusProtocol(Protocol):
    """Protocol for event bus"""

    async def publish_event(self, event: Any) -> bool:
        """Publish event"""
        ...


# ====================
# Exceptions
# ====================


class MembershipServiceError(Exception):
    """Base exception for membership service"""
    pass


class MemberNotFoundError(MembershipServiceError):
    """Raised when member is not found"""
    pass


class InvalidStatusTransitionError(MembershipServiceError):
    """Raised when status transition is not allowed"""

    def __init__(
        self,
        message: str,
        current_status: str = "",
        target_status: str = ""
    ):
        super().__init__(message)
        self.current_status = current_status
        self.target_status = target_status


class MemberStateConflictError(MembershipServiceError):
    """Raised when the member's status changed concurrently"""
    pass


__all__ = [
    "MembershipRepositoryProtocol",
    "EventBusProtocol",
    "MembershipServiceError",
    "MemberNotFoundError",
    "InvalidStatusTransitionError",
    "MemberStateConflictError",
]
