"""
Waitlist Service Event Handlers

A cancelled booking frees a spot; the next waiting user is promoted.
"""

import logging
from typing import Any, Callable, Dict, Union

logger = logging.getLogger(__name__)


def extract_event_data(event_or_data: Union[Dict[str, Any], Any]) -> Dict[str, Any]:
    if hasattr(event_or_data, 'data'):
        return event_or_data.data or {}
    return event_or_data or {}


async def handle_booking_cancelled(event_or_data: Union[Dict[str, Any], Any], waitlist_service=None):
    """
    Handle booking.cancelled

    Event data:
        - session_id: Class session that lost a booking
        - user_id: User who cancelled
    """
    try:
        event_data = extract_event_data(event_or_data)
        session_id = event_data.get("session_id")
        if not session_id:
            logger.warning("booking.cancelled event missing session_id")
            return

        if waitlist_service:
            result = await waitlist_service.promote_next(session_id)
            logger.info(f"Booking cancelled for session {session_id}, promoted={result.promoted}")

    except Exception as e:
        logger.error(f"Error handling booking.cancelled: {e}")


def get_event_handlers(waitlist_service) -> Dict[str, Callable]:
    return {
        "booking.cancelled": lambda event: handle_booking_cancelled(event, waitlist_service),
    }


__all__ = ["extract_event_data", "handle_booking_cancelled", "get_event_handlers"]
