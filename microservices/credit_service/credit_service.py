"""
Credit Service - Business Logic Layer

Monthly benefit credit issuance:
- Anniversary detection per member (billing_anchor)
- Tier bundle lookup (tier_allocator)
- Idempotent grant writes, one transaction per member
- First-cycle grants on membership activation
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from core.clock import Clock, SystemClock

from .billing_anchor import activation_window, cycle_window, is_anniversary
from .events.publishers import publish_credit_cycle_issued, publish_credit_issuance_completed
from .models import (
    ActiveMember,
    CreditGrant,
    CycleWindow,
    IssuanceResult,
    TierCreditBundle,
)
from .protocols import (
    CreditRepositoryProtocol,
    EventBusProtocol,
    CreditIssuanceFailedError,
)
from .tier_allocator import allocate

logger = logging.getLogger(__name__)


class CreditService:
    """
    Credit Service - Core business logic

    The daily run walks every active member, issues a cycle of credits to
    those whose anniversary is today, and reports aggregate counts. A
    failure for one member never aborts the run.
    """

    def __init__(
        self,
        repository: CreditRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize credit service with dependencies.

        Args:
            repository: Credit repository for data access
            event_bus: Event bus for publishing events (optional)
            clock: Time source (defaults to UTC wall clock)
        """
        self.repository = repository
        self.event_bus = event_bus
        self.clock = clock or SystemClock()

    # ====================
    # Daily Issuance
    # ====================

    async def run_daily_issuance(self, today: Optional[date] = None) -> IssuanceResult:
        """
        Issue credits to every active member whose anniversary is today.

        Counting:
        - created: grant rows written
        - skipped: members with an empty bundle, or whose grants for the
          cycle already exist
        - failed: members whose write raised

        Args:
            today: Anniversary date to process (defaults to the clock's today)

        Returns:
            IssuanceResult with aggregate counters
        """
        today = today or self.clock.today()
        logger.info(f"Starting daily credit issuance for {today.isoformat()}")

        rows = await self.repository.list_active_members()
        logger.info(f"Found {len(rows)} active members")

        created = 0
        skipped = 0
        failed = 0

        for row in rows:
            member_id = row.get("member_id")
            try:
                member = ActiveMember(**row)
                if not is_anniversary(member.membership_start_date, today):
                    continue

                logger.info(f"Processing member {member.member_id} ({member.membership_type})")

                bundle = allocate(member.membership_type)
                if bundle.is_empty:
                    logger.info(f"Member {member.member_id} tier has no credits, skipping")
                    skipped += 1
                    continue

                inserted = await self._issue_cycle(
                    member_id=member.member_id,
                    user_id=member.user_id,
                    bundle=bundle,
                    window=cycle_window(today, member.membership_start_date.day),
                    source="cycle",
                )
                if inserted:
                    created += len(inserted)
                else:
                    logger.info(f"Credits already exist for member {member.member_id} this cycle")
                    skipped += 1

            except Exception as e:
                failed += 1
                logger.error(f"Error issuing credits for member {member_id}: {e}", exc_info=True)

        result = IssuanceResult(
            run_date=today,
            created=created,
            skipped=skipped,
            failed=failed,
            processed_at=self.clock.now(),
        )
        logger.info(
            f"Credit issuance complete for {today.isoformat()}. "
            f"Created: {created}, Skipped: {skipped}, Failed: {failed}"
        )

        if self.event_bus:
            await publish_credit_issuance_completed(
                self.event_bus,
                run_date=today,
                created=created,
                skipped=skipped,
                failed=failed,
            )

        return result

    # ====================
    # Activation
    # ====================

    async def issue_activation_credits(
        self,
        member_id: str,
        user_id: Optional[str],
        tier_name: Optional[str],
        start_date: date,
    ) -> List[CreditGrant]:
        """
        Issue the first cycle when a membership is activated.

        Uses the activation window (credits stay usable 7 days past the
        cycle end). Safe to repeat: existing grants are left untouched.

        Raises:
            ValueError: If member_id is empty
            CreditIssuanceFailedError: If the grants cannot be written
        """
        if not member_id:
            raise ValueError("member_id is required")

        bundle = allocate(tier_name)
        if bundle.is_empty:
            logger.info(f"Member {member_id} tier '{tier_name}' has no credits, nothing to issue")
            return []

        try:
            inserted = await self._issue_cycle(
                member_id=member_id,
                user_id=user_id,
                bundle=bundle,
                window=activation_window(start_date),
                source="activation",
            )
        except Exception as e:
            raise CreditIssuanceFailedError(
                f"Failed to issue activation credits: {e}", member_id=member_id
            ) from e

        logger.info(f"Issued {len(inserted)} activation grants for member {member_id}")
        return [CreditGrant(**row) for row in inserted]

    # ====================
    # Queries
    # ====================

    async def get_member_credits(self, member_id: str, as_of: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Unexpired grants and per-type remaining balance.

        Raises:
            ValueError: If member_id is empty
        """
        if not member_id:
            raise ValueError("member_id is required")

        as_of = as_of or self.clock.now()
        rows = await self.repository.get_member_credits(member_id, as_of)
        grants = [CreditGrant(**row) for row in rows]

        balances: Dict[str, int] = {}
        for grant in grants:
            key = grant.credit_type.value
            balances[key] = balances.get(key, 0) + grant.credits_remaining

        return {
            "member_id": member_id,
            "as_of": as_of,
            "grants": grants,
            "balances": balances,
        }

    # ====================
    # Internal
    # ====================

    async def _issue_cycle(
        self,
        member_id: str,
        user_id: Optional[str],
        bundle: TierCreditBundle,
        window: CycleWindow,
        source: str,
    ) -> List[Dict[str, Any]]:
        """Write the missing grant types for one cycle; returns inserted rows"""
        existing = set(await self.repository.get_existing_credit_types(member_id, window.cycle_start))

        to_create = [
            {
                "member_id": member_id,
                "user_id": user_id,
                "credit_type": credit_type.value,
                "credits_total": amount,
                "credits_remaining": amount,
                "cycle_start": window.cycle_start,
                "cycle_end": window.cycle_end,
                "expires_at": window.expires_at,
                "source": source,
            }
            for credit_type, amount in bundle.items()
            if credit_type.value not in existing
        ]
        if not to_create:
            return []

        inserted = await self.repository.insert_grants(to_create)
        if len(inserted) < len(to_create):
            logger.info(
                f"{len(to_create) - len(inserted)} grants for member {member_id} "
                f"were issued concurrently, skipped"
            )

        if inserted and self.event_bus:
            await publish_credit_cycle_issued(
                self.event_bus,
                member_id=member_id,
                user_id=user_id,
                cycle_start=window.cycle_start,
                cycle_end=window.cycle_end,
                expires_at=window.expires_at,
                credits={row["credit_type"]: row["credits_total"] for row in inserted},
                source=source,
            )

        return inserted


__all__ = ["CreditService"]
