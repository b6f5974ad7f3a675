"""
Freeze Service Event Models

Event data models for freeze_service.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class FreezeEventType(str, Enum):
    """
    Events published by freeze_service.

    Stream: freeze-stream
    Subjects: freeze.>
    """
    FREEZE_REQUESTED = "freeze.requested"
    FREEZE_APPROVED = "freeze.approved"
    FREEZE_REJECTED = "freeze.rejected"
    FREEZE_CANCELLED = "freeze.cancelled"
    FREEZE_ACTIVATED = "freeze.activated"
    FREEZE_COMPLETED = "freeze.completed"


class FreezeSubscribedEventType(str, Enum):
    """Events that freeze_service subscribes to from other services."""
    BILLING_CHECKOUT_COMPLETED = "billing.checkout.completed"


# Checkout metadata type that pays a freeze fee
FREEZE_FEE_CHECKOUT_TYPE = "freeze_fee"


# =============================================================================
# Event Data Models
# =============================================================================

class FreezeRequestedEventData(BaseModel):
    """freeze.requested"""
    freeze_id: str
    member_id: str
    user_id: Optional[str] = None
    requested_start_date: date
    duration_months: int
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class FreezeReviewedEventData(BaseModel):
    """freeze.approved / freeze.rejected / freeze.cancelled"""
    freeze_id: str
    member_id: str
    user_id: Optional[str] = None
    status: str
    reviewed_by: Optional[str] = None
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    freeze_fee_total: Optional[str] = None
    rejection_reason: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class FreezePeriodEventData(BaseModel):
    """freeze.activated / freeze.completed (consumed by membership_service)"""
    freeze_id: str
    member_id: str
    user_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_reference: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


__all__ = [
    "FreezeEventType",
    "FreezeSubscribedEventType",
    "FREEZE_FEE_CHECKOUT_TYPE",
    "FreezeRequestedEventData",
    "FreezeReviewedEventData",
    "FreezePeriodEventData",
]
