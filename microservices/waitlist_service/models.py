"""
Waitlist Service Data Models

Class session waitlists and the promotion claim window.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import date, datetime, time
from pydantic import BaseModel, Field


class WaitlistStatus(str, Enum):
    """Waitlist entry status"""
    WAITING = "waiting"
    NOTIFIED = "notified"
    CLAIMED = "claimed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# ====================
# Core Data Models
# ====================

class ClassSession(BaseModel):
    """Capacity container for one scheduled class"""
    session_id: str
    class_name: Optional[str] = None
    session_date: date
    start_time: time
    current_enrollment: int = Field(0, ge=0)
    max_capacity: int = Field(..., ge=0)

    @property
    def has_open_spot(self) -> bool:
        return self.current_enrollment < self.max_capacity


class WaitlistEntry(BaseModel):
    """A user's queued position for a full session"""
    entry_id: str
    session_id: str
    user_id: str
    position: int = Field(..., ge=1)
    status: WaitlistStatus = WaitlistStatus.WAITING
    notified_at: Optional[datetime] = None
    claim_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromotionResult(BaseModel):
    """Outcome of promote_next"""
    session_id: str
    promoted: bool
    reason: Optional[str] = None
    user_id: Optional[str] = None
    entry_id: Optional[str] = None
    position: Optional[int] = None
    claim_expires_at: Optional[datetime] = None
    notification_sent: bool = False


class ExpiredClaimsResult(BaseModel):
    """Outcome of one claim-expiry sweep"""
    expired: int = 0
    sessions_promoted: int = 0
    failed: int = 0
    promotions: List[PromotionResult] = Field(default_factory=list)


# ====================
# Request / Response Models
# ====================

class PromoteRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    timestamp: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)
