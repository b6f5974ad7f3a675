"""
Membership Service Event Handlers

NATS event subscription handlers. Billing events come from the payment
webhook service; freeze events from freeze_service.
"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def _payload(event_data: Any) -> Dict[str, Any]:
    """Event envelope (.data) or raw dict"""
    if hasattr(event_data, "data"):
        return event_data.data or {}
    return event_data.get("data", event_data) if isinstance(event_data, dict) else {}


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class MembershipEventHandlers:
    """Membership service event handlers"""

    def __init__(self, membership_service):
        self.service = membership_service

    def get_event_handler_map(self) -> Dict[str, Callable]:
        return {
            "billing.checkout.completed": self.handle_checkout_completed,
            "billing.subscription.updated": self.handle_subscription_updated,
            "billing.subscription.deleted": self.handle_subscription_deleted,
            "freeze.activated": self.handle_freeze_activated,
            "freeze.completed": self.handle_freeze_completed,
        }

    async def handle_checkout_completed(self, event_data):
        """
        Checkout session completed.

        metadata.type membership_activation activates the member;
        annual_fee_payment records the fee. Other types belong to other
        services.
        """
        try:
            data = _payload(event_data)
            metadata = data.get("metadata") or {}
            checkout_type = metadata.get("type")

            if checkout_type == "membership_activation":
                member_id = metadata.get("member_id")
                if not member_id or not metadata.get("user_id"):
                    logger.error("membership_activation checkout missing member_id or user_id")
                    return
                await self.service.activate_membership(
                    member_id=member_id,
                    start_date=_parse_date(metadata.get("start_date")),
                    subscription_ref=data.get("subscription_id"),
                    customer_ref=data.get("customer_id"),
                    is_founding_member=str(metadata.get("is_founding_member", "")).lower() == "true",
                    gender=metadata.get("gender"),
                )

            elif checkout_type == "annual_fee_payment":
                member_id = metadata.get("member_id")
                if not member_id:
                    logger.error("annual_fee_payment checkout missing member_id")
                    return
                await self.service.record_annual_fee_paid(
                    member_id=member_id,
                    paid_at=_parse_datetime(data.get("completed_at")),
                )

            else:
                logger.debug(f"Checkout type '{checkout_type}' not handled by membership_service")

        except Exception as e:
            logger.error(f"Error handling billing.checkout.completed: {e}")

    async def handle_subscription_updated(self, event_data):
        """Mirror subscription status (active / past_due / unpaid / canceled)"""
        try:
            data = _payload(event_data)
            subscription_id = data.get("subscription_id")
            if not subscription_id:
                logger.warning("billing.subscription.updated missing subscription_id")
                return
            await self.service.apply_subscription_status(subscription_id, data.get("status"))

        except Exception as e:
            logger.error(f"Error handling billing.subscription.updated: {e}")

    async def handle_subscription_deleted(self, event_data):
        try:
            data = _payload(event_data)
            subscription_id = data.get("subscription_id")
            if not subscription_id:
                logger.warning("billing.subscription.deleted missing subscription_id")
                return
            await self.service.cancel_subscription(subscription_id)

        except Exception as e:
            logger.error(f"Error handling billing.subscription.deleted: {e}")

    async def handle_freeze_activated(self, event_data):
        try:
            data = _payload(event_data)
            member_id = data.get("member_id")
            if member_id:
                await self.service.freeze_member(member_id, freeze_id=data.get("freeze_id"))

        except Exception as e:
            logger.error(f"Error handling freeze.activated: {e}")

    async def handle_freeze_completed(self, event_data):
        try:
            data = _payload(event_data)
            member_id = data.get("member_id")
            if member_id:
                await self.service.unfreeze_member(member_id, freeze_id=data.get("freeze_id"))

        except Exception as e:
            logger.error(f"Error handling freeze.completed: {e}")


def get_event_handlers(membership_service) -> Dict[str, Callable]:
    """Get event handler map"""
    handlers = MembershipEventHandlers(membership_service)
    return handlers.get_event_handler_map()


__all__ = ["MembershipEventHandlers", "get_event_handlers"]
