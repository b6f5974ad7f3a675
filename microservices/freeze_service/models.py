"""
Freeze Service Data Models

Membership freeze (hold) requests and yearly eligibility.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


# ====================
# Enum Types
# ====================

class FreezeStatus(str, Enum):
    """Freeze request status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ====================
# Core Data Models
# ====================

class FreezeRequest(BaseModel):
    """A member's request to pause membership for 1 or 2 months"""
    id: Optional[int] = None
    freeze_id: str = Field(..., description="Unique freeze request ID")
    member_id: str = Field(..., description="Member ID")
    user_id: Optional[str] = Field(None, description="Requesting user")

    requested_start_date: date
    requested_end_date: date
    duration_months: int = Field(..., ge=1, le=2)
    reason: Optional[str] = None

    status: FreezeStatus = FreezeStatus.PENDING
    freeze_year: int

    # Fee
    freeze_fee_total: Decimal = Field(..., ge=0)
    fee_paid: bool = False
    payment_reference: Optional[str] = None

    # Review
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    # Scheduled period (set on approval)
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FreezeEligibility(BaseModel):
    """Yearly freeze allowance"""
    can_freeze: bool
    months_used: int = 0
    months_remaining: int = 2
    has_pending: bool = False
    freezes_used: int = 0


class ExpirationResult(BaseModel):
    """Outcome of one expiration sweep"""
    run_date: date
    total: int = 0
    processed: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


# ====================
# Request Models
# ====================

class CreateFreezeRequest(BaseModel):
    """Member freeze request"""
    member_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    requested_start_date: date
    duration_months: int
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator('duration_months')
    @classmethod
    def validate_duration(cls, v):
        if v not in (1, 2):
            raise ValueError("duration_months must be 1 or 2")
        return v


class ApproveFreezeRequest(BaseModel):
    """Admin approval with the chosen start date"""
    admin_id: str = Field(..., min_length=1)
    start_date: date


class RejectFreezeRequest(BaseModel):
    """Admin rejection"""
    admin_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=1000)


class CancelFreezeRequest(BaseModel):
    """Member withdrawal"""
    user_id: Optional[str] = None


class ActivateFreezeRequest(BaseModel):
    """Fee paid (or admin override)"""
    payment_reference: Optional[str] = None


class RunExpirationsRequest(BaseModel):
    today: Optional[date] = None


# ====================
# Response Models
# ====================

class FreezeListResponse(BaseModel):
    freezes: List[FreezeRequest] = Field(default_factory=list)
    total: int = 0


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    timestamp: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)
