"""
Freeze Service Protocols

Defines interfaces for dependency injection and testing.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .models import FreezeRequest, FreezeStatus


@runtime_checkable
class FreezeRepositoryProtocol(Protocol):
    """Repository interface for freeze requests"""

    async def get_freeze(self, freeze_id: str) -> Optional[FreezeRequest]:
        ...

    async def list_for_member_year(
        self,
        member_id: str,
        year: int,
        exclude_statuses: Sequence[FreezeStatus] = (),
    ) -> List[FreezeRequest]:
        """
        Freeze requests of a member for a freeze_year.

        Args:
            member_id: Member identifier
            year: freeze_year
            exclude_statuses: Statuses filtered out in the query
        """
        ...

    async def get_outstanding(self, member_id: str) -> Optional[FreezeRequest]:
        """The member's pending or approved request, any year"""
        ...

    async def create_freeze(self, data: Dict[str, Any]) -> FreezeRequest:
        """
        Insert a request.

        Raises:
            DuplicateFreezeRequestError: Another pending/approved request exists
        """
        ...

    async def update_status(
        self,
        freeze_id: str,
        expected_statuses: Sequence[FreezeStatus],
        new_status: FreezeStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[FreezeRequest]:
        """
        Change status only while the row is in one of expected_statuses.

        Returns None if the row was not in an expected status.
        """
        ...

    async def list_due_expirations(self, today: date) -> List[FreezeRequest]:
        """Active freezes with actual_end_date <= today"""
        ...

    async def list_freezes(
        self,
        status: Optional[FreezeStatus] = None,
        member_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[FreezeRequest]:
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Event bus interface for publishing events"""

    async def publish_event(self, event: Any) -> bool:
        ...


# ====================
# Custom Exceptions
# ====================


class FreezeServiceError(Exception):
    """Base exception for freeze service errors"""
    pass


class FreezeNotFoundError(FreezeServiceError):
    """Raised when a freeze request does not exist"""
    pass


class FreezeValidationError(FreezeServiceError):
    """Raised when a request is rejected by the freeze rules"""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class FreezeStateError(FreezeServiceError):
    """Raised when a request is not in a state that allows the action"""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status


class DuplicateFreezeRequestError(FreezeServiceError):
    """Raised by the repository when the one-outstanding-request constraint fires"""
    pass


__all__ = [
    "FreezeRepositoryProtocol",
    "EventBusProtocol",
    "FreezeServiceError",
    "FreezeNotFoundError",
    "FreezeValidationError",
    "FreezeStateError",
    "DuplicateFreezeRequestError",
]
