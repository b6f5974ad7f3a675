"""
Credit Service Data Models

Monthly benefit credits issued to club members on their billing anniversary.
A grant covers one credit type for one monthly cycle.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator, model_validator


# ====================
# Enumerations
# ====================

class CreditType(str, Enum):
    """Benefit credit kinds (closed set)"""
    CLASS = "class"
    RED_LIGHT = "red_light"
    DRY_CRYO = "dry_cryo"


class MembershipTier(str, Enum):
    """Membership tiers, lowest to highest"""
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


# ====================
# Core Data Models
# ====================

class CreditGrant(BaseModel):
    """
    One allocation of a single credit type to a member for one cycle.
    Unique per (member_id, credit_type, cycle_start); never deleted.
    """
    id: Optional[int] = None
    grant_id: str = Field(..., min_length=1, description="Unique grant identifier")

    member_id: str = Field(..., min_length=1, description="Member ID")
    user_id: Optional[str] = Field(None, description="Account user ID")

    credit_type: CreditType = Field(..., description="Credit kind")
    credits_total: int = Field(..., ge=0, description="Credits issued for the cycle")
    credits_remaining: int = Field(..., ge=0, description="Credits not yet consumed")

    cycle_start: date = Field(..., description="First day of the cycle (anniversary)")
    cycle_end: date = Field(..., description="Day before the next anniversary")
    expires_at: datetime = Field(..., description="End of the last usable day")

    source: str = Field(default="cycle", description="cycle or activation")
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_remaining(self):
        """credits_remaining never exceeds credits_total"""
        if self.credits_remaining > self.credits_total:
            raise ValueError("credits_remaining cannot exceed credits_total")
        return self


class ActiveMember(BaseModel):
    """Member snapshot used by the issuance job"""
    member_id: str
    user_id: str
    membership_type: Optional[str] = None
    membership_start_date: date

    @field_validator('membership_start_date', mode='before')
    @classmethod
    def coerce_start_date(cls, v):
        if isinstance(v, datetime):
            return v.date()
        return v


class CycleWindow(BaseModel):
    """Date window of one credit cycle"""
    cycle_start: date
    cycle_end: date
    expires_at: datetime


class TierCreditBundle(BaseModel):
    """Credits granted per cycle for a tier"""
    class_credits: int = Field(default=0, ge=0)
    red_light_credits: int = Field(default=0, ge=0)
    dry_cryo_credits: int = Field(default=0, ge=0)

    def for_type(self, credit_type: CreditType) -> int:
        return {
            CreditType.CLASS: self.class_credits,
            CreditType.RED_LIGHT: self.red_light_credits,
            CreditType.DRY_CRYO: self.dry_cryo_credits,
        }[credit_type]

    @property
    def is_empty(self) -> bool:
        return not any(self.for_type(t) for t in CreditType)

    def items(self) -> List[tuple]:
        """(credit_type, amount) pairs with a positive amount"""
        return [(t, self.for_type(t)) for t in CreditType if self.for_type(t) > 0]


class IssuanceResult(BaseModel):
    """Aggregate outcome of one issuance run"""
    run_date: date
    created: int = 0
    skipped: int = 0
    failed: int = 0
    processed_at: datetime


# ====================
# Request/Response Models
# ====================

class RunIssuanceRequest(BaseModel):
    """Manual issuance trigger"""
    today: Optional[date] = Field(None, description="Run as of this date (defaults to today, UTC)")


class CreditGrantResponse(BaseModel):
    """Single grant as exposed over the API"""
    grant_id: str
    member_id: str
    credit_type: CreditType
    credits_total: int
    credits_remaining: int
    cycle_start: date
    cycle_end: date
    expires_at: datetime


class MemberCreditsResponse(BaseModel):
    """Unexpired grants and per-type balance for a member"""
    member_id: str
    as_of: datetime
    grants: List[CreditGrantResponse] = Field(default_factory=list)
    balances: Dict[str, int] = Field(default_factory=dict)


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    timestamp: str
    dependencies: Dict[str, Any] = Field(default_factory=dict)
