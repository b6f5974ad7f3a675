"""
Credit Service Event Handlers

Handle events from other services that trigger credit operations.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, Union

logger = logging.getLogger(__name__)


def extract_event_data(event_or_data: Union[Dict[str, Any], Any]) -> Dict[str, Any]:
    """
    Extract data from either an Event object or a raw dict.

    Handles both:
    - Event objects with .data attribute (from NATS)
    - Raw dict (for testing or direct calls)
    """
    if hasattr(event_or_data, 'data'):
        return event_or_data.data
    return event_or_data


# ============================================================================
# Event Handlers
# ============================================================================


async def handle_membership_activated(event_or_data: Union[Dict[str, Any], Any], credit_service=None):
    """
    Handle membership.activated event from membership_service

    Issue the first cycle of credits with the activation grace period

    Event data:
        - member_id: Member ID
        - user_id: Linked user account
        - membership_type: Tier label
        - membership_start_date: ISO date the cycle starts on
    """
    try:
        event_data = extract_event_data(event_or_data)
        member_id = event_data.get("member_id")
        user_id = event_data.get("user_id")
        start_raw = event_data.get("membership_start_date")

        if not member_id or not start_raw:
            logger.warning("membership.activated event missing member_id or membership_start_date")
            return

        logger.info(f"Processing membership.activated for member {member_id}")

        if credit_service:
            start_date = start_raw if isinstance(start_raw, date) else date.fromisoformat(str(start_raw)[:10])
            await credit_service.issue_activation_credits(
                member_id=member_id,
                user_id=user_id,
                tier_name=event_data.get("membership_type"),
                start_date=start_date,
            )

    except Exception as e:
        logger.error(f"Error handling membership.activated event: {e}")


# ============================================================================
# Handler Registry
# ============================================================================


def get_event_handlers(credit_service) -> Dict[str, Callable]:
    """
    Get all event handlers for credit service.

    Returns a dict mapping event patterns to handler functions.
    """
    return {
        "membership.activated": lambda event: handle_membership_activated(event, credit_service),
    }


__all__ = [
    "extract_event_data",
    "handle_membership_activated",
    "get_event_handlers",
]
