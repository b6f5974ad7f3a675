"""
Credit Service Event Publishers

Publish events for credit issuance.
Following the standard event-driven architecture pattern.
"""

import logging
from datetime import date, datetime
from typing import Dict, Optional

from core.nats_client import Event

from .models import (
    CreditEventType,
    create_credit_cycle_issued_event_data,
    create_credit_issuance_completed_event_data,
)

logger = logging.getLogger(__name__)


async def publish_credit_cycle_issued(
    event_bus,
    member_id: str,
    cycle_start: date,
    cycle_end: date,
    expires_at: datetime,
    credits: Dict[str, int],
    user_id: Optional[str] = None,
    source: str = "cycle",
):
    """
    Publish credit.cycle_issued event

    Args:
        event_bus: NATS event bus instance
        member_id: Member receiving credits
        cycle_start: Cycle start date
        cycle_end: Cycle end date
        expires_at: Credit expiration timestamp
        credits: Credits issued per type
        user_id: Linked user account (optional)
        source: "cycle" or "activation"
    """
    try:
        event_data = create_credit_cycle_issued_event_data(
            member_id=member_id,
            user_id=user_id,
            cycle_start=cycle_start,
            cycle_end=cycle_end,
            expires_at=expires_at,
            credits=credits,
            source=source,
        )

        event = Event(
            event_type=CreditEventType.CREDIT_CYCLE_ISSUED.value,
            source="credit_service",
            data=event_data.model_dump(mode='json'),
        )

        await event_bus.publish_event(event)
        logger.info(f"Published credit.cycle_issued for member {member_id}: {credits}")

    except Exception as e:
        logger.error(f"Failed to publish credit.cycle_issued: {e}")


async def publish_credit_issuance_completed(
    event_bus,
    run_date: date,
    created: int,
    skipped: int,
    failed: int,
):
    """Publish credit.issuance_completed event"""
    try:
        event_data = create_credit_issuance_completed_event_data(
            run_date=run_date,
            created=created,
            skipped=skipped,
            failed=failed,
        )

        event = Event(
            event_type=CreditEventType.CREDIT_ISSUANCE_COMPLETED.value,
            source="credit_service",
            data=event_data.model_dump(mode='json'),
        )

        await event_bus.publish_event(event)
        logger.info(f"Published credit.issuance_completed for {run_date}")

    except Exception as e:
        logger.error(f"Failed to publish credit.issuance_completed: {e}")


__all__ = [
    "publish_credit_cycle_issued",
    "publish_credit_issuance_completed",
]
