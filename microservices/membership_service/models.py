"""
Membership Service Data Models

Pydantic models for club members, billing status and payment health.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import date, datetime
from pydantic import BaseModel, Field


# ====================
# Enum Types
# ====================

class MemberStatus(str, Enum):
    """Member lifecycle status"""
    PENDING_ACTIVATION = "pending_activation"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    FROZEN = "frozen"
    CANCELLED = "cancelled"


class TransitionSource(str, Enum):
    """Who drove a status change"""
    BILLING_WEBHOOK = "billing_webhook"
    FREEZE = "freeze"
    ADMIN = "admin"


class PaymentIssue(str, Enum):
    """Payment problems found on a member"""
    INITIATION_FEE_UNPAID = "initiation_fee_unpaid"
    NO_SUBSCRIPTION = "no_subscription"
    DUES_PAST_DUE = "dues_past_due"


class BenefitAccess(str, Enum):
    """Benefit gating derived from payment status"""
    FULL = "full"
    DEGRADED = "degraded"
    BLOCKED = "blocked"


# ====================
# Core Data Models
# ====================

class Member(BaseModel):
    """Club member"""
    id: Optional[int] = None
    member_id: str = Field(..., description="Unique member ID")
    user_id: Optional[str] = Field(None, description="Linked account user ID")

    status: MemberStatus = MemberStatus.PENDING_ACTIVATION
    membership_type: Optional[str] = Field(None, description="Tier label, e.g. 'Gold Membership'")
    membership_start_date: Optional[date] = None

    # Billing
    annual_fee_paid_at: Optional[datetime] = None
    subscription_ref: Optional[str] = Field(None, description="Payment processor subscription ID")
    customer_ref: Optional[str] = Field(None, description="Payment processor customer ID")
    billing_type: Optional[str] = None
    is_founding_member: bool = False
    gender: Optional[str] = None

    # Timestamps
    activated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemberStatusHistory(BaseModel):
    """Status change audit entry"""
    history_id: str
    member_id: str
    from_status: Optional[MemberStatus] = None
    to_status: MemberStatus
    source: TransitionSource
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentStatusResult(BaseModel):
    """Composite payment health of a member"""
    status: str = Field(..., description="current, multiple_issues, no_membership or a single issue")
    issues: List[PaymentIssue] = Field(default_factory=list)
    is_fully_paid: bool = False
    has_blocking_issues: bool = False
    has_non_blocking_issues: bool = False


# ====================
# Request Models
# ====================

class ActivateMembershipRequest(BaseModel):
    """Admin activation"""
    start_date: Optional[date] = None
    subscription_ref: Optional[str] = None
    customer_ref: Optional[str] = None
    is_founding_member: bool = False
    gender: Optional[str] = None


class ChangeStatusRequest(BaseModel):
    """Admin status change"""
    status: MemberStatus
    reason: Optional[str] = Field(None, max_length=500)


class RecordAnnualFeeRequest(BaseModel):
    """Manual annual fee record"""
    paid_at: Optional[datetime] = None


# ====================
# Response Models
# ====================

class MemberResponse(BaseModel):
    """Member operation response"""
    success: bool
    message: Optional[str] = None
    member: Optional[Member] = None


class PaymentStatusResponse(BaseModel):
    """Payment status with benefit gating"""
    member_id: str
    payment_status: PaymentStatusResult
    benefit_access: BenefitAccess


class StatusHistoryResponse(BaseModel):
    """Status history"""
    member_id: str
    history: List[MemberStatusHistory] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    timestamp: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)
