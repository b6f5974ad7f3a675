"""
Freeze Service Event Publishers

Publish freeze request lifecycle events.
"""

import logging

from core.nats_client import Event

from ..models import FreezeRequest
from .models import (
    FreezeEventType,
    FreezePeriodEventData,
    FreezeRequestedEventData,
    FreezeReviewedEventData,
)

logger = logging.getLogger(__name__)


async def _publish(event_bus, event_type: FreezeEventType, data: dict) -> bool:
    try:
        event = Event(
            event_type=event_type.value,
            source="freeze_service",
            data=data,
        )
        await event_bus.publish_event(event)
        logger.info(f"Published {event_type.value} for freeze {data.get('freeze_id')}")
        return True
    except Exception as e:
        logger.error(f"Failed to publish {event_type.value}: {e}")
        return False


async def publish_freeze_requested(event_bus, freeze: FreezeRequest) -> bool:
    data = FreezeRequestedEventData(
        freeze_id=freeze.freeze_id,
        member_id=freeze.member_id,
        user_id=freeze.user_id,
        requested_start_date=freeze.requested_start_date,
        duration_months=freeze.duration_months,
    )
    return await _publish(event_bus, FreezeEventType.FREEZE_REQUESTED, data.model_dump(mode="json"))


async def publish_freeze_reviewed(event_bus, event_type: FreezeEventType, freeze: FreezeRequest) -> bool:
    """
    Publish freeze.approved, freeze.rejected or freeze.cancelled

    An approval carries the fee so the billing side can send the payment link.
    """
    data = FreezeReviewedEventData(
        freeze_id=freeze.freeze_id,
        member_id=freeze.member_id,
        user_id=freeze.user_id,
        status=freeze.status.value,
        reviewed_by=freeze.reviewed_by,
        actual_start_date=freeze.actual_start_date,
        actual_end_date=freeze.actual_end_date,
        freeze_fee_total=str(freeze.freeze_fee_total),
        rejection_reason=freeze.rejection_reason,
    )
    return await _publish(event_bus, event_type, data.model_dump(mode="json"))


async def publish_freeze_activated(event_bus, freeze: FreezeRequest) -> bool:
    """Publish freeze.activated (membership_service freezes the member)"""
    data = FreezePeriodEventData(
        freeze_id=freeze.freeze_id,
        member_id=freeze.member_id,
        user_id=freeze.user_id,
        start_date=freeze.actual_start_date,
        end_date=freeze.actual_end_date,
        payment_reference=freeze.payment_reference,
    )
    return await _publish(event_bus, FreezeEventType.FREEZE_ACTIVATED, data.model_dump(mode="json"))


async def publish_freeze_completed(event_bus, freeze: FreezeRequest) -> bool:
    """Publish freeze.completed (membership_service reactivates the member)"""
    data = FreezePeriodEventData(
        freeze_id=freeze.freeze_id,
        member_id=freeze.member_id,
        user_id=freeze.user_id,
        start_date=freeze.actual_start_date,
        end_date=freeze.actual_end_date,
    )
    return await _publish(event_bus, FreezeEventType.FREEZE_COMPLETED, data.model_dump(mode="json"))


__all__ = [
    "publish_freeze_requested",
    "publish_freeze_reviewed",
    "publish_freeze_activated",
    "publish_freeze_completed",
]
