"""
Waitlist Service Event Publishers
"""

import logging

from core.nats_client import Event

from ..models import PromotionResult, WaitlistEntry
from .models import WaitlistClaimExpiredEventData, WaitlistEventType, WaitlistPromotedEventData

logger = logging.getLogger(__name__)


async def publish_waitlist_promoted(event_bus, result: PromotionResult) -> bool:
    """Publish waitlist.promoted"""
    try:
        data = WaitlistPromotedEventData(
            session_id=result.session_id,
            entry_id=result.entry_id,
            user_id=result.user_id,
            position=result.position,
            claim_expires_at=result.claim_expires_at,
            notification_sent=result.notification_sent,
        )
        event = Event(
            event_type=WaitlistEventType.WAITLIST_PROMOTED.value,
            source="waitlist_service",
            data=data.model_dump(mode="json"),
        )
        await event_bus.publish_event(event)
        logger.info(f"Published waitlist.promoted for entry {result.entry_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to publish waitlist.promoted: {e}")
        return False


async def publish_waitlist_claim_expired(event_bus, entry: WaitlistEntry) -> bool:
    """Publish waitlist.claim_expired"""
    try:
        data = WaitlistClaimExpiredEventData(
            session_id=entry.session_id,
            entry_id=entry.entry_id,
            user_id=entry.user_id,
            claim_expires_at=entry.claim_expires_at,
        )
        event = Event(
            event_type=WaitlistEventType.WAITLIST_CLAIM_EXPIRED.value,
            source="waitlist_service",
            data=data.model_dump(mode="json"),
        )
        await event_bus.publish_event(event)
        return True
    except Exception as e:
        logger.error(f"Failed to publish waitlist.claim_expired: {e}")
        return False


__all__ = ["publish_waitlist_promoted", "publish_waitlist_claim_expired"]
