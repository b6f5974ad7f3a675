"""
Membership Service Component Tests

MembershipService against an in-memory repository:
- activation and the first-cycle event
- webhook, freeze and admin status changes
- annual fee recording
- payment status and benefit access

Usage:
    pytest tests/component/membership -v
"""

from datetime import date, datetime, timezone

import pytest

from microservices.membership_service.models import BenefitAccess, MemberStatus, PaymentIssue
from microservices.membership_service.protocols import (
    InvalidStatusTransitionError,
    MemberNotFoundError,
    MemberStateConflictError,
)


# =============================================================================
# Activation
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestActivation:

    async def test_activation_sets_billing_fields(self, membership_service, pending_member):
        member = await membership_service.activate_membership(
            "mem_pending",
            subscription_ref="sub_123",
            customer_ref="cus_123",
            is_founding_member=True,
        )

        assert member.status == MemberStatus.ACTIVE
        assert member.membership_start_date == date(2025, 3, 15)
        assert member.subscription_ref == "sub_123"
        assert member.customer_ref == "cus_123"
        assert member.billing_type == "annual"
        assert member.activated_at == datetime(2025, 3, 15, 9, 0, tzinfo=timezone.utc)

    async def test_activation_publishes_activated_event(self, membership_service, pending_member, mock_event_bus):
        await membership_service.activate_membership("mem_pending", start_date=date(2025, 1, 31))

        event = mock_event_bus.assert_event_published("membership.activated", {"member_id": "mem_pending"})
        assert event["data"]["membership_start_date"] == "2025-01-31"
        assert event["data"]["membership_type"] == "Gold Membership"
        mock_event_bus.assert_event_published(
            "membership.status_changed",
            {"from_status": "pending_activation", "to_status": "active"},
        )

    async def test_repeat_activation_is_a_no_op(self, membership_service, active_member, mock_event_bus, mock_repository):
        member = await membership_service.activate_membership("mem_active", start_date=date(2025, 3, 1))

        assert member.status == MemberStatus.ACTIVE
        assert member.membership_start_date == date(2024, 6, 15)
        mock_event_bus.assert_no_events_published()
        assert mock_repository.history == []

    async def test_activation_records_history(self, membership_service, pending_member, mock_repository):
        await membership_service.activate_membership("mem_pending")

        history = await membership_service.get_status_history("mem_pending")
        assert len(history) == 1
        assert history[0].from_status == MemberStatus.PENDING_ACTIVATION
        assert history[0].to_status == MemberStatus.ACTIVE
        assert history[0].source.value == "billing_webhook"

    async def test_unknown_member_raises(self, membership_service):
        with pytest.raises(MemberNotFoundError):
            await membership_service.activate_membership("mem_missing")


# =============================================================================
# Billing webhook transitions
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestSubscriptionStatus:

    @pytest.mark.parametrize("external, expected", [
        ("past_due", MemberStatus.PAST_DUE),
        ("unpaid", MemberStatus.PAST_DUE),
        ("canceled", MemberStatus.CANCELLED),
    ])
    async def test_external_status_maps_to_member_status(
        self, membership_service, active_member, external, expected
    ):
        member = await membership_service.apply_subscription_status("sub_active", external)
        assert member.status == expected

    async def test_recovery_from_past_due(self, membership_service, mock_repository):
        mock_repository.add_member("mem_late", status=MemberStatus.PAST_DUE, subscription_ref="sub_late")

        member = await membership_service.apply_subscription_status("sub_late", "active")

        assert member.status == MemberStatus.ACTIVE

    async def test_unmapped_status_is_ignored(self, membership_service, active_member, mock_repository):
        result = await membership_service.apply_subscription_status("sub_active", "trialing")

        assert result is None
        assert mock_repository.members["mem_active"].status == MemberStatus.ACTIVE

    async def test_unknown_subscription_returns_none(self, membership_service):
        assert await membership_service.apply_subscription_status("sub_nobody", "past_due") is None

    async def test_invalid_webhook_transition_is_ignored(self, membership_service, mock_repository, mock_event_bus):
        mock_repository.add_member("mem_gone", status=MemberStatus.CANCELLED, subscription_ref="sub_gone")

        member = await membership_service.apply_subscription_status("sub_gone", "active")

        assert member.status == MemberStatus.CANCELLED
        mock_event_bus.assert_no_events_published()

    async def test_webhook_conflict_returns_current_member(self, membership_service, active_member, mock_repository):
        mock_repository.conflict_on_update = True

        member = await membership_service.apply_subscription_status("sub_active", "past_due")

        assert member.status == MemberStatus.CANCELLED
        assert mock_repository.history == []

    async def test_subscription_deleted_cancels(self, membership_service, active_member, mock_event_bus):
        member = await membership_service.cancel_subscription("sub_active")

        assert member.status == MemberStatus.CANCELLED
        mock_event_bus.assert_event_published(
            "membership.status_changed",
            {"to_status": "cancelled", "source": "billing_webhook"},
        )


# =============================================================================
# Admin and freeze transitions
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestStatusChanges:

    async def test_admin_invalid_transition_raises(self, membership_service, mock_repository):
        mock_repository.add_member("mem_gone", status=MemberStatus.CANCELLED)

        with pytest.raises(InvalidStatusTransitionError):
            await membership_service.change_status("mem_gone", MemberStatus.ACTIVE)

    async def test_admin_conflict_raises(self, membership_service, active_member, mock_repository):
        mock_repository.conflict_on_update = True

        with pytest.raises(MemberStateConflictError):
            await membership_service.change_status("mem_active", MemberStatus.PAST_DUE)

    async def test_admin_activation_goes_through_activation(self, membership_service, pending_member, mock_event_bus):
        member = await membership_service.change_status("mem_pending", MemberStatus.ACTIVE)

        assert member.status == MemberStatus.ACTIVE
        mock_event_bus.assert_event_published("membership.activated")
        mock_event_bus.assert_event_published("membership.status_changed", {"source": "admin"})

    async def test_admin_change_records_reason(self, membership_service, active_member):
        await membership_service.change_status("mem_active", MemberStatus.CANCELLED, reason="requested by member")

        history = await membership_service.get_status_history("mem_active")
        assert history[0].reason == "requested by member"
        assert history[0].source.value == "admin"

    async def test_freeze_and_unfreeze(self, membership_service, active_member):
        frozen = await membership_service.freeze_member("mem_active", freeze_id="frz_1")
        assert frozen.status == MemberStatus.FROZEN

        thawed = await membership_service.unfreeze_member("mem_active", freeze_id="frz_1")
        assert thawed.status == MemberStatus.ACTIVE

        history = await membership_service.get_status_history("mem_active")
        assert [h.to_status for h in history] == [MemberStatus.ACTIVE, MemberStatus.FROZEN]
        assert history[1].reason == "freeze frz_1 activated"

    async def test_freeze_of_past_due_member_is_ignored(self, membership_service, mock_repository):
        mock_repository.add_member("mem_late", status=MemberStatus.PAST_DUE)

        member = await membership_service.freeze_member("mem_late")

        assert member.status == MemberStatus.PAST_DUE


# =============================================================================
# Annual fee
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestAnnualFee:

    async def test_first_payment_is_recorded_and_published(self, membership_service, pending_member, mock_event_bus):
        paid_at = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

        member = await membership_service.record_annual_fee_paid("mem_pending", paid_at=paid_at)

        assert member.annual_fee_paid_at == paid_at
        mock_event_bus.assert_event_published("membership.annual_fee_paid", {"member_id": "mem_pending"})

    async def test_renewal_moves_paid_date_forward(self, membership_service, active_member, mock_event_bus):
        renewed_at = datetime(2026, 6, 1, tzinfo=timezone.utc)

        member = await membership_service.record_annual_fee_paid("mem_active", paid_at=renewed_at)

        assert member.annual_fee_paid_at == renewed_at
        mock_event_bus.assert_event_published("membership.annual_fee_paid", {"member_id": "mem_active"})

    async def test_older_payment_does_not_move_paid_date_back(
        self, membership_service, active_member, mock_repository, mock_event_bus
    ):
        await membership_service.record_annual_fee_paid("mem_active", paid_at=datetime(2026, 6, 1, tzinfo=timezone.utc))
        member = await membership_service.record_annual_fee_paid(
            "mem_active", paid_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
        )

        assert member.annual_fee_paid_at == datetime(2026, 6, 1, tzinfo=timezone.utc)
        assert mock_repository.members["mem_active"].annual_fee_paid_at == datetime(2026, 6, 1, tzinfo=timezone.utc)
        assert len(mock_event_bus.get_published("membership.annual_fee_paid")) == 2

    async def test_unknown_member_raises(self, membership_service):
        with pytest.raises(MemberNotFoundError):
            await membership_service.record_annual_fee_paid("mem_missing")


# =============================================================================
# Payment status
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestPaymentStatus:

    async def test_fully_paid_member(self, membership_service, active_member):
        result = await membership_service.get_payment_status("mem_active")

        assert result["payment_status"].status == "current"
        assert result["payment_status"].is_fully_paid is True
        assert result["benefit_access"] == BenefitAccess.FULL

    async def test_past_due_member_is_degraded(self, membership_service, mock_repository):
        mock_repository.add_member(
            "mem_late",
            status=MemberStatus.PAST_DUE,
            subscription_ref="sub_late",
            annual_fee_paid_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        result = await membership_service.get_payment_status("mem_late")

        assert result["payment_status"].issues == [PaymentIssue.DUES_PAST_DUE]
        assert result["benefit_access"] == BenefitAccess.DEGRADED

    async def test_missing_member_is_blocked(self, membership_service):
        result = await membership_service.get_payment_status("mem_missing")

        assert result["payment_status"].status == "no_membership"
        assert result["payment_status"].is_fully_paid is False
        assert result["benefit_access"] == BenefitAccess.BLOCKED

    async def test_empty_member_id_rejected(self, membership_service):
        with pytest.raises(ValueError):
            await membership_service.get_payment_status("")
