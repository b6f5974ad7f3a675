"""
Membership Service Business Logic

Member status lifecycle driven by billing webhooks, freeze events and admin
actions, plus the payment status read model used to gate benefits.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from core.clock import Clock, SystemClock

from .events.publishers import (
    publish_annual_fee_paid,
    publish_membership_activated,
    publish_membership_status_changed,
)
from .models import (
    BenefitAccess,
    Member,
    MemberStatus,
    MemberStatusHistory,
    PaymentStatusResult,
    TransitionSource,
)
from .payment_status import benefit_access, derive_payment_status
from .protocols import (
    EventBusProtocol,
    MemberNotFoundError,
    MemberStateConflictError,
    MembershipRepositoryProtocol,
)
from .status_machine import assert_transition, can_transition, map_subscription_status

logger = logging.getLogger(__name__)


class MembershipService:
    """Membership service core business logic"""

    def __init__(
        self,
        repository: MembershipRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.clock = clock or SystemClock()

    async def initialize(self):
        """Initialize service"""
        await self.repository.initialize()
        logger.info("Membership service initialized")

    # ====================
    # Queries
    # ====================

    async def get_member(self, member_id: str) -> Member:
        """Get member or raise MemberNotFoundError"""
        if not member_id:
            raise ValueError("member_id is required")
        member = await self.repository.get_member(member_id)
        if not member:
            raise MemberNotFoundError(f"Member not found: {member_id}")
        return member

    async def get_payment_status(self, member_id: str) -> Dict[str, Any]:
        """
        Payment status and benefit access for a member.

        An unknown member yields the "no_membership" result rather than an
        error so callers can gate benefits uniformly.
        """
        if not member_id:
            raise ValueError("member_id is required")
        member = await self.repository.get_member(member_id)
        result: PaymentStatusResult = derive_payment_status(member)
        access: BenefitAccess = benefit_access(result)
        return {
            "member_id": member_id,
            "payment_status": result,
            "benefit_access": access,
        }

    async def get_status_history(self, member_id: str, limit: int = 50) -> List[MemberStatusHistory]:
        await self.get_member(member_id)
        return await self.repository.get_status_history(member_id, limit=limit)

    # ====================
    # Lifecycle
    # ====================

    async def activate_membership(
        self,
        member_id: str,
        start_date: Optional[date] = None,
        subscription_ref: Optional[str] = None,
        customer_ref: Optional[str] = None,
        is_founding_member: bool = False,
        gender: Optional[str] = None,
        source: TransitionSource = TransitionSource.BILLING_WEBHOOK,
    ) -> Member:
        """
        pending_activation -> active.

        Writes the billing references captured at checkout and publishes
        membership.activated so the first credit cycle is issued.
        """
        member = await self.get_member(member_id)
        start_date = start_date or self.clock.today()

        fields = {
            "membership_start_date": start_date,
            "activated_at": self.clock.now(),
            "is_founding_member": is_founding_member,
            "billing_type": "annual" if is_founding_member else "monthly",
        }
        if subscription_ref:
            fields["subscription_ref"] = subscription_ref
        if customer_ref:
            fields["customer_ref"] = customer_ref
        if gender:
            fields["gender"] = gender

        updated = await self._transition(
            member,
            MemberStatus.ACTIVE,
            source=source,
            reason="membership activated",
            fields=fields,
        )

        if member.status == MemberStatus.PENDING_ACTIVATION and updated.status == MemberStatus.ACTIVE:
            if self.event_bus:
                await publish_membership_activated(
                    self.event_bus,
                    member_id=updated.member_id,
                    user_id=updated.user_id,
                    membership_type=updated.membership_type,
                    membership_start_date=updated.membership_start_date or start_date,
                    is_founding_member=updated.is_founding_member,
                )
            logger.info(f"Member {member_id} activated (start {start_date.isoformat()})")
        return updated

    async def apply_subscription_status(self, subscription_ref: str, external_status: str) -> Optional[Member]:
        """
        Mirror a payment processor subscription status onto the member.

        Returns None when no member holds the subscription or the status
        does not map to a member status.
        """
        target = map_subscription_status(external_status)
        if target is None:
            logger.info(f"Subscription {subscription_ref} status '{external_status}' ignored")
            return None

        member = await self.repository.get_member_by_subscription(subscription_ref)
        if not member:
            logger.warning(f"No member found for subscription {subscription_ref}")
            return None

        return await self._transition(
            member,
            target,
            source=TransitionSource.BILLING_WEBHOOK,
            reason=f"subscription status {external_status}",
        )

    async def cancel_subscription(self, subscription_ref: str) -> Optional[Member]:
        """Subscription deleted at the payment processor"""
        member = await self.repository.get_member_by_subscription(subscription_ref)
        if not member:
            logger.warning(f"No member found for subscription {subscription_ref}")
            return None

        return await self._transition(
            member,
            MemberStatus.CANCELLED,
            source=TransitionSource.BILLING_WEBHOOK,
            reason="subscription deleted",
        )

    async def record_annual_fee_paid(self, member_id: str, paid_at: Optional[datetime] = None) -> Member:
        """Record an annual fee payment; the stored date only moves forward"""
        paid_at = paid_at or self.clock.now()

        updated = await self.repository.set_annual_fee_paid(member_id, paid_at)
        if not updated:
            raise MemberNotFoundError(f"Member not found: {member_id}")

        if self.event_bus:
            await publish_annual_fee_paid(
                self.event_bus,
                member_id=member_id,
                user_id=updated.user_id,
                paid_at=paid_at,
            )
        logger.info(f"Annual fee recorded for member {member_id}")
        return updated

    async def freeze_member(self, member_id: str, freeze_id: Optional[str] = None) -> Member:
        """active -> frozen once a freeze is paid and active"""
        member = await self.get_member(member_id)
        return await self._transition(
            member,
            MemberStatus.FROZEN,
            source=TransitionSource.FREEZE,
            reason=f"freeze {freeze_id} activated" if freeze_id else "freeze activated",
        )

    async def unfreeze_member(self, member_id: str, freeze_id: Optional[str] = None) -> Member:
        """frozen -> active when the freeze period ends"""
        member = await self.get_member(member_id)
        return await self._transition(
            member,
            MemberStatus.ACTIVE,
            source=TransitionSource.FREEZE,
            reason=f"freeze {freeze_id} completed" if freeze_id else "freeze completed",
        )

    async def change_status(
        self,
        member_id: str,
        target: MemberStatus,
        reason: Optional[str] = None,
    ) -> Member:
        """
        Admin status change.

        Raises:
            MemberNotFoundError: Unknown member
            InvalidStatusTransitionError: Transition not allowed
            MemberStateConflictError: Status changed concurrently
        """
        member = await self.get_member(member_id)
        if target == MemberStatus.ACTIVE and member.status == MemberStatus.PENDING_ACTIVATION:
            return await self.activate_membership(member_id, source=TransitionSource.ADMIN)
        return await self._transition(member, target, source=TransitionSource.ADMIN, reason=reason)

    # ====================
    # Internal
    # ====================

    async def _transition(
        self,
        member: Member,
        target: MemberStatus,
        source: TransitionSource,
        reason: Optional[str] = None,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Member:
        """
        Apply one status change.

        Admin transitions raise on an invalid or lost change. Webhook and
        freeze transitions log and return the member unchanged, so the
        delivering system does not retry forever.
        """
        strict = source == TransitionSource.ADMIN

        if member.status == target:
            logger.debug(f"Member {member.member_id} already {target.value}, no change")
            return member

        if not can_transition(member.status, target):
            if strict:
                assert_transition(member.status, target)
            logger.warning(
                f"Ignoring {source.value} transition for member {member.member_id}: "
                f"{member.status.value} -> {target.value} not allowed"
            )
            return member

        updated = await self.repository.update_status(
            member.member_id,
            expected_status=member.status,
            new_status=target,
            fields=fields,
        )
        if updated is None:
            message = (
                f"Member {member.member_id} changed concurrently, "
                f"{member.status.value} -> {target.value} not applied"
            )
            if strict:
                raise MemberStateConflictError(message)
            logger.warning(message)
            return await self.repository.get_member(member.member_id) or member

        await self.repository.add_status_history(
            member_id=member.member_id,
            from_status=member.status,
            to_status=target,
            source=source.value,
            reason=reason,
        )

        if self.event_bus:
            await publish_membership_status_changed(
                self.event_bus,
                member_id=member.member_id,
                user_id=member.user_id,
                from_status=member.status.value,
                to_status=target.value,
                source=source.value,
                reason=reason,
            )

        logger.info(
            f"Member {member.member_id} status {member.status.value} -> {target.value} ({source.value})"
        )
        return updated


__all__ = ["MembershipService"]
