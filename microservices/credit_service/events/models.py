"""
Credit Service Event Models

Event data models for credit issuance events.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class CreditEventType(str, Enum):
    """
    Events published by credit_service.

    Stream: credit-stream
    Subjects: credit.>
    """
    CREDIT_CYCLE_ISSUED = "credit.cycle_issued"
    CREDIT_ISSUANCE_COMPLETED = "credit.issuance_completed"


class CreditSubscribedEventType(str, Enum):
    """Events that credit_service subscribes to from other services."""
    MEMBERSHIP_ACTIVATED = "membership.activated"


class CreditStreamConfig:
    """Stream configuration for credit_service"""
    STREAM_NAME = "credit-stream"
    SUBJECTS = ["credit.>"]
    MAX_MESSAGES = 100000
    CONSUMER_PREFIX = "credit"


# ============================================================================
# Credit Issuance Event Models
# ============================================================================


class CreditCycleIssuedEventData(BaseModel):
    """
    Event: credit.cycle_issued
    Triggered when a member's grants for a cycle are written
    """

    member_id: str = Field(..., description="Member receiving credits")
    user_id: Optional[str] = Field(None, description="Linked user account")
    cycle_start: date = Field(..., description="Cycle start date")
    cycle_end: date = Field(..., description="Cycle end date")
    expires_at: datetime = Field(..., description="Credit expiration timestamp")
    credits: Dict[str, int] = Field(..., description="Credits issued per type")
    source: str = Field(default="cycle", description="cycle or activation")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CreditIssuanceCompletedEventData(BaseModel):
    """
    Event: credit.issuance_completed
    Triggered at the end of each daily issuance run
    """

    run_date: date = Field(..., description="Anniversary date processed")
    created: int = Field(..., description="Grant rows created")
    skipped: int = Field(..., description="Members skipped")
    failed: int = Field(..., description="Members that failed")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


# ============================================================================
# Helper Functions
# ============================================================================


def create_credit_cycle_issued_event_data(
    member_id: str,
    cycle_start: date,
    cycle_end: date,
    expires_at: datetime,
    credits: Dict[str, int],
    user_id: Optional[str] = None,
    source: str = "cycle",
) -> CreditCycleIssuedEventData:
    """Create CreditCycleIssuedEventData instance"""
    return CreditCycleIssuedEventData(
        member_id=member_id,
        user_id=user_id,
        cycle_start=cycle_start,
        cycle_end=cycle_end,
        expires_at=expires_at,
        credits=credits,
        source=source,
    )


def create_credit_issuance_completed_event_data(
    run_date: date,
    created: int,
    skipped: int,
    failed: int,
) -> CreditIssuanceCompletedEventData:
    """Create CreditIssuanceCompletedEventData instance"""
    return CreditIssuanceCompletedEventData(
        run_date=run_date,
        created=created,
        skipped=skipped,
        failed=failed,
    )


__all__ = [
    "CreditEventType",
    "CreditSubscribedEventType",
    "CreditStreamConfig",
    "CreditCycleIssuedEventData",
    "CreditIssuanceCompletedEventData",
    "create_credit_cycle_issued_event_data",
    "create_credit_issuance_completed_event_data",
]
