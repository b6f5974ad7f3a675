"""
Waitlist Service Event Models
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class WaitlistEventType(str, Enum):
    """
    Events published by waitlist_service.

    Stream: waitlist-stream
    Subjects: waitlist.>
    """
    WAITLIST_PROMOTED = "waitlist.promoted"
    WAITLIST_CLAIM_EXPIRED = "waitlist.claim_expired"


class WaitlistSubscribedEventType(str, Enum):
    """Events that waitlist_service subscribes to"""
    BOOKING_CANCELLED = "booking.cancelled"


class WaitlistPromotedEventData(BaseModel):
    """waitlist.promoted"""
    session_id: str
    entry_id: str
    user_id: str
    position: int
    claim_expires_at: datetime
    notification_sent: bool = False
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class WaitlistClaimExpiredEventData(BaseModel):
    """waitlist.claim_expired"""
    session_id: str
    entry_id: str
    user_id: str
    claim_expires_at: Optional[datetime] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


__all__ = [
    "WaitlistEventType",
    "WaitlistSubscribedEventType",
    "WaitlistPromotedEventData",
    "WaitlistClaimExpiredEventData",
]
