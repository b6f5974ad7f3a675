"""
Membership Service Event Publishers
"""

import logging
from datetime import date, datetime
from typing import Optional

from core.nats_client import Event

from .models import (
    AnnualFeePaidEventData,
    MembershipActivatedEventData,
    MembershipEventType,
    MembershipStatusChangedEventData,
)

logger = logging.getLogger(__name__)


async def _publish(event_bus, event_type: MembershipEventType, data: dict) -> None:
    try:
        event = Event(
            event_type=event_type.value,
            source="membership_service",
            data=data,
        )
        await event_bus.publish_event(event)
        logger.info(f"Published {event_type.value} for member {data.get('member_id')}")
    except Exception as e:
        logger.warning(f"Failed to publish event {event_type.value}: {e}")


async def publish_membership_activated(
    event_bus,
    member_id: str,
    user_id: Optional[str],
    membership_type: Optional[str],
    membership_start_date: date,
    is_founding_member: bool = False,
):
    """Publish membership.activated (credit_service issues the first cycle)"""
    data = MembershipActivatedEventData(
        member_id=member_id,
        user_id=user_id,
        membership_type=membership_type,
        membership_start_date=membership_start_date,
        is_founding_member=is_founding_member,
    )
    await _publish(event_bus, MembershipEventType.MEMBERSHIP_ACTIVATED, data.model_dump(mode="json"))


async def publish_membership_status_changed(
    event_bus,
    member_id: str,
    user_id: Optional[str],
    from_status: str,
    to_status: str,
    source: str,
    reason: Optional[str] = None,
):
    """Publish membership.status_changed"""
    data = MembershipStatusChangedEventData(
        member_id=member_id,
        user_id=user_id,
        from_status=from_status,
        to_status=to_status,
        source=source,
        reason=reason,
    )
    await _publish(event_bus, MembershipEventType.MEMBERSHIP_STATUS_CHANGED, data.model_dump(mode="json"))


async def publish_annual_fee_paid(
    event_bus,
    member_id: str,
    user_id: Optional[str],
    paid_at: datetime,
):
    """Publish membership.annual_fee_paid"""
    data = AnnualFeePaidEventData(member_id=member_id, user_id=user_id, paid_at=paid_at)
    await _publish(event_bus, MembershipEventType.MEMBERSHIP_ANNUAL_FEE_PAID, data.model_dump(mode="json"))


__all__ = [
    "publish_membership_activated",
    "publish_membership_status_changed",
    "publish_annual_fee_paid",
]
