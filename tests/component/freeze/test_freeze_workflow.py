"""
Freeze Service Component Tests

FreezeService against an in-memory repository:
- yearly eligibility and request validation
- admin review, fee-paid activation and member cancellation
- daily expiration sweep

Usage:
    pytest tests/component/freeze -v
"""

from datetime import date
from decimal import Decimal

import pytest

from microservices.freeze_service.events.handlers import get_event_handlers
from microservices.freeze_service.models import FreezeStatus
from microservices.freeze_service.protocols import (
    FreezeNotFoundError,
    FreezeStateError,
    FreezeValidationError,
)


# =============================================================================
# Eligibility
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestEligibility:

    async def test_fresh_member_has_full_allowance(self, freeze_service):
        eligibility = await freeze_service.check_eligibility("mem_1")

        assert eligibility.can_freeze is True
        assert eligibility.months_remaining == 2
        assert eligibility.months_used == 0

    async def test_rejected_and_cancelled_do_not_count(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_r", "mem_1", FreezeStatus.REJECTED, duration_months=2)
        mock_repository.add_freeze("frz_c", "mem_1", FreezeStatus.CANCELLED, duration_months=2)

        eligibility = await freeze_service.check_eligibility("mem_1")

        assert eligibility.can_freeze is True
        assert eligibility.months_remaining == 2

    async def test_previous_year_is_ignored(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_old", "mem_1", FreezeStatus.COMPLETED, duration_months=2, freeze_year=2024)

        eligibility = await freeze_service.check_eligibility("mem_1")

        assert eligibility.months_remaining == 2

    async def test_pending_request_blocks(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_p", "mem_1", FreezeStatus.PENDING)

        eligibility = await freeze_service.check_eligibility("mem_1")

        assert eligibility.has_pending is True
        assert eligibility.can_freeze is False
        assert eligibility.months_remaining == 2

    async def test_empty_member_id_rejected(self, freeze_service):
        with pytest.raises(ValueError):
            await freeze_service.check_eligibility("")


# =============================================================================
# Requests
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestCreateRequest:

    async def test_request_is_created_pending(self, freeze_service, mock_event_bus):
        freeze = await freeze_service.create_request("mem_1", date(2025, 4, 1), 2, user_id="usr_1")

        assert freeze.status == FreezeStatus.PENDING
        assert freeze.freeze_id.startswith("frz_")
        assert freeze.requested_end_date == date(2025, 6, 1)
        assert freeze.freeze_year == 2025
        assert freeze.freeze_fee_total == Decimal("40.00")
        mock_event_bus.assert_event_published("freeze.requested", {"member_id": "mem_1", "duration_months": 2})

    @pytest.mark.parametrize("months", [0, 3, 12])
    async def test_invalid_duration(self, freeze_service, months):
        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 4, 1), months)
        assert exc_info.value.reason == "invalid_duration"

    async def test_outstanding_request_blocks_new_one(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_a", "mem_1", FreezeStatus.APPROVED)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 6, 1), 1)
        assert exc_info.value.reason == "pending_request_exists"

    async def test_outstanding_request_from_last_year_blocks(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_a", "mem_1", FreezeStatus.PENDING, freeze_year=2024)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 6, 1), 1)
        assert exc_info.value.reason == "pending_request_exists"

    async def test_allowance_used_up(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.COMPLETED, duration_months=2)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 9, 1), 1)
        assert exc_info.value.reason == "not_eligible"

    async def test_two_freezes_used_up(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.COMPLETED)
        mock_repository.add_freeze("frz_2", "mem_1", FreezeStatus.ACTIVE)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 9, 1), 1)
        assert exc_info.value.reason == "not_eligible"

    async def test_duration_above_remaining(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.COMPLETED)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.create_request("mem_1", date(2025, 9, 1), 2)
        assert exc_info.value.reason == "exceeds_remaining_months"

    async def test_no_event_on_rejection(self, freeze_service, mock_event_bus):
        with pytest.raises(FreezeValidationError):
            await freeze_service.create_request("mem_1", date(2025, 4, 1), 5)
        mock_event_bus.assert_no_events_published()


# =============================================================================
# Review, activation, cancellation
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestReviewWorkflow:

    async def test_approve_sets_period(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.PENDING, duration_months=2)

        freeze = await freeze_service.approve_request("frz_1", "adm_1", date(2025, 5, 31))

        assert freeze.status == FreezeStatus.APPROVED
        assert freeze.reviewed_by == "adm_1"
        assert freeze.actual_start_date == date(2025, 5, 31)
        assert freeze.actual_end_date == date(2025, 7, 31)
        mock_event_bus.assert_event_published("freeze.approved", {"freeze_id": "frz_1"})

    async def test_approve_twice_fails(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.APPROVED)

        with pytest.raises(FreezeStateError) as exc_info:
            await freeze_service.approve_request("frz_1", "adm_1", date(2025, 4, 1))
        assert exc_info.value.current_status == "approved"

    async def test_reject_requires_reason(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.PENDING)

        with pytest.raises(FreezeValidationError) as exc_info:
            await freeze_service.reject_request("frz_1", "adm_1", "   ")
        assert exc_info.value.reason == "reason_required"

    @pytest.mark.parametrize("status", [FreezeStatus.PENDING, FreezeStatus.APPROVED])
    async def test_reject_outstanding(self, freeze_service, mock_repository, mock_event_bus, status):
        mock_repository.add_freeze("frz_1", "mem_1", status)

        freeze = await freeze_service.reject_request("frz_1", "adm_1", " travel dates unclear ")

        assert freeze.status == FreezeStatus.REJECTED
        assert freeze.rejection_reason == "travel dates unclear"
        mock_event_bus.assert_event_published("freeze.rejected")

    async def test_reject_active_fails(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.ACTIVE)

        with pytest.raises(FreezeStateError):
            await freeze_service.reject_request("frz_1", "adm_1", "too late")

    async def test_activation_after_fee(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.APPROVED, actual_start_date=date(2025, 4, 1))

        freeze = await freeze_service.activate_freeze("frz_1", payment_reference="pi_123")

        assert freeze.status == FreezeStatus.ACTIVE
        assert freeze.fee_paid is True
        assert freeze.payment_reference == "pi_123"
        mock_event_bus.assert_event_published("freeze.activated", {"member_id": "mem_1"})

    async def test_activation_is_idempotent(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.ACTIVE, fee_paid=True)

        freeze = await freeze_service.activate_freeze("frz_1")

        assert freeze.status == FreezeStatus.ACTIVE
        mock_event_bus.assert_no_events_published()

    async def test_pending_cannot_activate(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.PENDING)

        with pytest.raises(FreezeStateError):
            await freeze_service.activate_freeze("frz_1")

    async def test_member_cancels_own_request(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.PENDING, user_id="usr_1")

        freeze = await freeze_service.cancel_request("frz_1", user_id="usr_1")

        assert freeze.status == FreezeStatus.CANCELLED
        mock_event_bus.assert_event_published("freeze.cancelled")

    async def test_other_user_cannot_cancel(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.PENDING, user_id="usr_1")

        with pytest.raises(FreezeStateError):
            await freeze_service.cancel_request("frz_1", user_id="usr_2")

    async def test_unknown_freeze(self, freeze_service):
        with pytest.raises(FreezeNotFoundError):
            await freeze_service.approve_request("frz_missing", "adm_1", date(2025, 4, 1))


# =============================================================================
# Expiration sweep
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestExpirations:

    async def test_due_freezes_complete(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_due", "mem_1", FreezeStatus.ACTIVE, actual_end_date=date(2025, 3, 15))
        mock_repository.add_freeze("frz_later", "mem_2", FreezeStatus.ACTIVE, actual_end_date=date(2025, 3, 16))

        result = await freeze_service.process_expirations()

        assert result.run_date == date(2025, 3, 15)
        assert result.total == 1
        assert result.processed == 1
        assert mock_repository.freezes["frz_due"].status == FreezeStatus.COMPLETED
        assert mock_repository.freezes["frz_later"].status == FreezeStatus.ACTIVE
        mock_event_bus.assert_event_published("freeze.completed", {"freeze_id": "frz_due", "member_id": "mem_1"})

    async def test_one_failure_does_not_stop_the_sweep(self, freeze_service, mock_repository):
        mock_repository.add_freeze("frz_bad", "mem_1", FreezeStatus.ACTIVE, actual_end_date=date(2025, 3, 1))
        mock_repository.add_freeze("frz_ok", "mem_2", FreezeStatus.ACTIVE, actual_end_date=date(2025, 3, 1))
        mock_repository.failing_ids.append("frz_bad")

        result = await freeze_service.process_expirations(date(2025, 3, 15))

        assert result.total == 2
        assert result.processed == 1
        assert result.failed == 1
        assert "frz_bad" in result.errors[0]
        assert mock_repository.freezes["frz_ok"].status == FreezeStatus.COMPLETED

    async def test_nothing_due(self, freeze_service, mock_event_bus):
        result = await freeze_service.process_expirations(date(2025, 3, 15))

        assert result.total == 0
        mock_event_bus.assert_no_events_published()


# =============================================================================
# Events
# =============================================================================


@pytest.mark.component
@pytest.mark.asyncio
class TestFreezeFeeCheckout:

    async def test_freeze_fee_checkout_activates(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.APPROVED)
        for pattern, handler in get_event_handlers(freeze_service).items():
            await mock_event_bus.subscribe_to_events(pattern, handler)

        await mock_event_bus.simulate_event("billing.checkout.completed", {
            "payment_intent": "pi_9",
            "metadata": {"type": "freeze_fee", "freeze_id": "frz_1"},
        })

        assert mock_repository.freezes["frz_1"].status == FreezeStatus.ACTIVE
        assert mock_repository.freezes["frz_1"].payment_reference == "pi_9"

    async def test_other_checkout_types_ignored(self, freeze_service, mock_repository, mock_event_bus):
        mock_repository.add_freeze("frz_1", "mem_1", FreezeStatus.APPROVED)
        for pattern, handler in get_event_handlers(freeze_service).items():
            await mock_event_bus.subscribe_to_events(pattern, handler)

        await mock_event_bus.simulate_event("billing.checkout.completed", {
            "metadata": {"type": "membership_activation", "freeze_id": "frz_1"},
        })

        assert mock_repository.freezes["frz_1"].status == FreezeStatus.APPROVED
