"""
Freeze Service Event Handlers

Handle billing events that complete a freeze.
"""

import logging
from typing import Any, Callable, Dict, Union

from .models import FREEZE_FEE_CHECKOUT_TYPE

logger = logging.getLogger(__name__)


def extract_event_data(event_or_data: Union[Dict[str, Any], Any]) -> Dict[str, Any]:
    """Event object (.data) or raw dict"""
    if hasattr(event_or_data, 'data'):
        return event_or_data.data or {}
    return event_or_data or {}


async def handle_checkout_completed(event_or_data: Union[Dict[str, Any], Any], freeze_service=None):
    """
    Handle billing.checkout.completed

    Only checkouts with metadata.type == "freeze_fee" are ours; the fee
    being paid activates the approved freeze.

    Event data:
        - metadata.type: Checkout purpose
        - metadata.freeze_id: Freeze request being paid
        - payment_intent: Payment reference
    """
    try:
        event_data = extract_event_data(event_or_data)
        metadata = event_data.get("metadata") or {}

        if metadata.get("type") != FREEZE_FEE_CHECKOUT_TYPE:
            return

        freeze_id = metadata.get("freeze_id")
        if not freeze_id:
            logger.error("freeze_fee checkout missing freeze_id")
            return

        logger.info(f"Freeze fee paid for {freeze_id}")

        if freeze_service:
            await freeze_service.activate_freeze(
                freeze_id,
                payment_reference=event_data.get("payment_intent"),
            )

    except Exception as e:
        logger.error(f"Error handling billing.checkout.completed: {e}")


def get_event_handlers(freeze_service) -> Dict[str, Callable]:
    """Event pattern -> handler"""
    return {
        "billing.checkout.completed": lambda event: handle_checkout_completed(event, freeze_service),
    }


__all__ = [
    "extract_event_data",
    "handle_checkout_completed",
    "get_event_handlers",
]
