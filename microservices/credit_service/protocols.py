"""
Credit Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


# ====================
# Repository Protocol
# ====================


@runtime_checkable
class CreditRepositoryProtocol(Protocol):
    """Repository interface for credit issuance"""

    async def list_active_members(self) -> List[Dict[str, Any]]:
        """
        List members eligible for monthly issuance.

        Returns:
            Rows with member_id, user_id, membership_type, membership_start_date
            for members with status 'active' and a linked user
        """
        ...

    async def get_existing_credit_types(self, member_id: str, cycle_start: date) -> List[str]:
        """
        Credit types already granted to a member for a cycle.

        Args:
            member_id: Member identifier
            cycle_start: Cycle start date

        Returns:
            List of credit_type values
        """
        ...

    async def insert_grants(self, grants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert one member's grants atomically.

        Rows conflicting on (member_id, credit_type, cycle_start) are
        silently dropped.

        Args:
            grants: Grant rows to insert

        Returns:
            Rows actually inserted
        """
        ...

    async def get_member_credits(self, member_id: str, as_of: datetime) -> List[Dict[str, Any]]:
        """
        Unexpired grants for a member.

        Args:
            member_id: Member identifier
            as_of: Grants expiring before this instant are excluded

        Returns:
            Grant rows ordered by expires_at
        """
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Event bus interface for publishing events"""

    async def publish_event(self, event: Any) -> bool:
        """
        Publish event to NATS.

        Args:
            event: Event envelope
        """
        ...


# ====================
# Custom Exceptions (no I/O operations)
# ====================


class CreditServiceError(Exception):
    """Base exception for credit service errors"""
    pass


class CreditIssuanceFailedError(CreditServiceError):
    """Raised when a member's grants cannot be written"""

    def __init__(self, message: str, member_id: Optional[str] = None):
        super().__init__(message)
        self.member_id = member_id


__all__ = [
    "CreditRepositoryProtocol",
    "EventBusProtocol",
    "CreditServiceError",
    "CreditIssuanceFailedError",
]
