"""
Membership Service Event Models

Event data models for membership_service.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class MembershipEventType(str, Enum):
    """
    Events published by membership_service.

    Stream: membership-stream
    Subjects: membership.>
    """
    MEMBERSHIP_ACTIVATED = "membership.activated"
    MEMBERSHIP_STATUS_CHANGED = "membership.status_changed"
    MEMBERSHIP_ANNUAL_FEE_PAID = "membership.annual_fee_paid"


class MembershipSubscribedEventType(str, Enum):
    """Events that membership_service subscribes to from other services."""
    BILLING_CHECKOUT_COMPLETED = "billing.checkout.completed"
    BILLING_SUBSCRIPTION_UPDATED = "billing.subscription.updated"
    BILLING_SUBSCRIPTION_DELETED = "billing.subscription.deleted"
    FREEZE_ACTIVATED = "freeze.activated"
    FREEZE_COMPLETED = "freeze.completed"


class MembershipActivatedEventData(BaseModel):
    """membership.activated"""
    member_id: str
    user_id: Optional[str] = None
    membership_type: Optional[str] = None
    membership_start_date: date
    is_founding_member: bool = False
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class MembershipStatusChangedEventData(BaseModel):
    """membership.status_changed"""
    member_id: str
    user_id: Optional[str] = None
    from_status: str
    to_status: str
    source: str
    reason: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class AnnualFeePaidEventData(BaseModel):
    """membership.annual_fee_paid"""
    member_id: str
    user_id: Optional[str] = None
    paid_at: datetime
    timestamp: datetime = Field(default_factory=datetime.utcnow)


__all__ = [
    "MembershipEventType",
    "MembershipSubscribedEventType",
    "MembershipActivatedEventData",
    "MembershipStatusChangedEventData",
    "AnnualFeePaidEventData",
]
