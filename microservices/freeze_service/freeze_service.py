"""
Freeze Service Business Logic

Membership freeze requests: yearly eligibility, member request, admin
review, fee-paid activation and the daily expiration sweep.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from core.clock import Clock, SystemClock

from .events.models import FreezeEventType
from .events.publishers import (
    publish_freeze_activated,
    publish_freeze_completed,
    publish_freeze_requested,
    publish_freeze_reviewed,
)
from .freeze_rules import (
    ALLOWED_DURATIONS,
    EXCLUDED_STATUSES,
    OUTSTANDING_STATUSES,
    compute_eligibility,
    freeze_end_date,
    freeze_fee_total,
)
from .models import ExpirationResult, FreezeEligibility, FreezeRequest, FreezeStatus
from .protocols import (
    DuplicateFreezeRequestError,
    EventBusProtocol,
    FreezeNotFoundError,
    FreezeRepositoryProtocol,
    FreezeStateError,
    FreezeValidationError,
)

logger = logging.getLogger(__name__)


class FreezeService:
    """Freeze service core business logic"""

    def __init__(
        self,
        repository: FreezeRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.clock = clock or SystemClock()

    # ====================
    # Eligibility
    # ====================

    async def check_eligibility(self, member_id: str, year: Optional[int] = None) -> FreezeEligibility:
        """Yearly allowance for member_id (defaults to the current year)"""
        if not member_id:
            raise ValueError("member_id is required")
        year = year or self.clock.today().year
        freezes = await self.repository.list_for_member_year(
            member_id, year, exclude_statuses=EXCLUDED_STATUSES
        )
        return compute_eligibility(freezes)

    # ====================
    # Member actions
    # ====================

    async def create_request(
        self,
        member_id: str,
        requested_start_date: date,
        duration_months: int,
        user_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> FreezeRequest:
        """
        Submit a freeze request.

        Raises:
            FreezeValidationError: reason is one of invalid_duration,
                pending_request_exists, not_eligible, exceeds_remaining_months
        """
        if duration_months not in ALLOWED_DURATIONS:
            raise FreezeValidationError(
                f"Freeze duration must be 1 or 2 months, got {duration_months}",
                reason="invalid_duration",
            )

        freeze_year = self.clock.today().year
        eligibility = await self.check_eligibility(member_id, freeze_year)

        if eligibility.has_pending or await self.repository.get_outstanding(member_id):
            raise FreezeValidationError(
                "A freeze request is already pending or approved",
                reason="pending_request_exists",
            )
        if not eligibility.can_freeze:
            raise FreezeValidationError(
                f"Member {member_id} has no freeze allowance left for {freeze_year}",
                reason="not_eligible",
            )
        if duration_months > eligibility.months_remaining:
            raise FreezeValidationError(
                f"Only {eligibility.months_remaining} freeze month(s) remaining in {freeze_year}",
                reason="exceeds_remaining_months",
            )

        try:
            freeze = await self.repository.create_freeze({
                "member_id": member_id,
                "user_id": user_id,
                "requested_start_date": requested_start_date,
                "requested_end_date": freeze_end_date(requested_start_date, duration_months),
                "duration_months": duration_months,
                "reason": reason,
                "freeze_year": freeze_year,
                "freeze_fee_total": freeze_fee_total(duration_months),
            })
        except DuplicateFreezeRequestError as e:
            raise FreezeValidationError(str(e), reason="pending_request_exists") from e

        logger.info(
            f"Freeze {freeze.freeze_id} requested by member {member_id}: "
            f"{duration_months} month(s) from {requested_start_date.isoformat()}"
        )
        if self.event_bus:
            await publish_freeze_requested(self.event_bus, freeze)
        return freeze

    async def cancel_request(self, freeze_id: str, user_id: Optional[str] = None) -> FreezeRequest:
        """Member withdraws a pending or approved request"""
        freeze = await self.get_freeze(freeze_id)
        if user_id and freeze.user_id and freeze.user_id != user_id:
            raise FreezeStateError(f"Freeze {freeze_id} belongs to another user", freeze.status.value)

        updated = await self._change_status(freeze, OUTSTANDING_STATUSES, FreezeStatus.CANCELLED)
        if self.event_bus:
            await publish_freeze_reviewed(self.event_bus, FreezeEventType.FREEZE_CANCELLED, updated)
        return updated

    # ====================
    # Admin actions
    # ====================

    async def approve_request(self, freeze_id: str, admin_id: str, start_date: date) -> FreezeRequest:
        """pending -> approved; the admin may pick a different start date"""
        freeze = await self.get_freeze(freeze_id)
        updated = await self._change_status(
            freeze,
            (FreezeStatus.PENDING,),
            FreezeStatus.APPROVED,
            {
                "reviewed_by": admin_id,
                "reviewed_at": self.clock.now(),
                "actual_start_date": start_date,
                "actual_end_date": freeze_end_date(start_date, freeze.duration_months),
            },
        )
        if self.event_bus:
            await publish_freeze_reviewed(self.event_bus, FreezeEventType.FREEZE_APPROVED, updated)
        return updated

    async def reject_request(self, freeze_id: str, admin_id: str, reason: str) -> FreezeRequest:
        """pending or approved -> rejected, with a required reason"""
        if not reason or not reason.strip():
            raise FreezeValidationError("A rejection reason is required", reason="reason_required")

        freeze = await self.get_freeze(freeze_id)
        updated = await self._change_status(
            freeze,
            OUTSTANDING_STATUSES,
            FreezeStatus.REJECTED,
            {
                "reviewed_by": admin_id,
                "reviewed_at": self.clock.now(),
                "rejection_reason": reason.strip(),
            },
        )
        if self.event_bus:
            await publish_freeze_reviewed(self.event_bus, FreezeEventType.FREEZE_REJECTED, updated)
        return updated

    async def activate_freeze(self, freeze_id: str, payment_reference: Optional[str] = None) -> FreezeRequest:
        """Freeze fee paid: approved -> active"""
        freeze = await self.get_freeze(freeze_id)
        if freeze.status == FreezeStatus.ACTIVE:
            logger.info(f"Freeze {freeze_id} already active")
            return freeze

        fields = {"fee_paid": True}
        if payment_reference:
            fields["payment_reference"] = payment_reference

        updated = await self._change_status(freeze, (FreezeStatus.APPROVED,), FreezeStatus.ACTIVE, fields)
        if self.event_bus:
            await publish_freeze_activated(self.event_bus, updated)
        return updated

    # ====================
    # Expiration sweep
    # ====================

    async def process_expirations(self, today: Optional[date] = None) -> ExpirationResult:
        """Complete every active freeze whose period has ended"""
        today = today or self.clock.today()
        logger.info(f"Starting freeze expiration check for {today.isoformat()}")

        due = await self.repository.list_due_expirations(today)
        result = ExpirationResult(run_date=today, total=len(due))
        if not due:
            logger.info("No expired freezes found")
            return result

        for freeze in due:
            try:
                updated = await self.repository.update_status(
                    freeze.freeze_id, (FreezeStatus.ACTIVE,), FreezeStatus.COMPLETED
                )
                if updated is None:
                    result.errors.append(f"Freeze {freeze.freeze_id} was no longer active")
                    result.failed += 1
                    continue

                if self.event_bus:
                    await publish_freeze_completed(self.event_bus, updated)
                result.processed += 1
                logger.info(f"Freeze {freeze.freeze_id} completed for member {freeze.member_id}")

            except Exception as e:
                result.failed += 1
                result.errors.append(f"Error processing freeze {freeze.freeze_id}: {e}")
                logger.error(f"Error processing freeze {freeze.freeze_id}: {e}")

        logger.info(
            f"Freeze expirations done: {result.processed}/{result.total} processed, {result.failed} failed"
        )
        return result

    # ====================
    # Queries
    # ====================

    async def get_freeze(self, freeze_id: str) -> FreezeRequest:
        freeze = await self.repository.get_freeze(freeze_id)
        if not freeze:
            raise FreezeNotFoundError(f"Freeze request not found: {freeze_id}")
        return freeze

    async def list_freezes(
        self,
        status: Optional[FreezeStatus] = None,
        member_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[FreezeRequest]:
        return await self.repository.list_freezes(status=status, member_id=member_id, limit=limit, offset=offset)

    # ====================
    # Internal
    # ====================

    async def _change_status(
        self,
        freeze: FreezeRequest,
        expected: Sequence[FreezeStatus],
        target: FreezeStatus,
        fields: Optional[dict] = None,
    ) -> FreezeRequest:
        if freeze.status not in expected:
            raise FreezeStateError(
                f"Freeze {freeze.freeze_id} is {freeze.status.value}, cannot become {target.value}",
                freeze.status.value,
            )

        updated = await self.repository.update_status(freeze.freeze_id, expected, target, fields)
        if updated is None:
            current = await self.repository.get_freeze(freeze.freeze_id)
            current_status = current.status.value if current else None
            raise FreezeStateError(
                f"Freeze {freeze.freeze_id} changed concurrently (now {current_status})",
                current_status,
            )

        logger.info(f"Freeze {freeze.freeze_id} {freeze.status.value} -> {target.value}")
        return updated


__all__ = ["FreezeService"]
