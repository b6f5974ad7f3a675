"""
Waitlist Service Business Logic

Promotes the next waiting user when a class session has an open spot and
sweeps claims that lapsed unclaimed.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from core.clock import Clock, SystemClock

from .events.publishers import publish_waitlist_claim_expired, publish_waitlist_promoted
from .models import ClassSession, ExpiredClaimsResult, PromotionResult, WaitlistEntry
from .protocols import (
    AccountClientProtocol,
    EventBusProtocol,
    NotificationClientProtocol,
    SessionNotFoundError,
    WaitlistRepositoryProtocol,
)

logger = logging.getLogger(__name__)

CLAIM_WINDOW = timedelta(minutes=5)
MAX_CLAIM_ATTEMPTS = 5
WAITLIST_NOTIFICATION = "waitlist_notification"


def format_session_date(d: date) -> str:
    """Monday, January 6, 2025"""
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_session_time(t: time) -> str:
    """6:30 PM"""
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


class WaitlistService:
    """Waitlist promotion engine"""

    def __init__(
        self,
        repository: WaitlistRepositoryProtocol,
        account_client: Optional[AccountClientProtocol] = None,
        notification_client: Optional[NotificationClientProtocol] = None,
        event_bus: Optional[EventBusProtocol] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.account_client = account_client
        self.notification_client = notification_client
        self.event_bus = event_bus
        self.clock = clock or SystemClock()

    async def promote_next(self, session_id: str, now: Optional[datetime] = None) -> PromotionResult:
        """
        Hand the open spot of a session to the lowest-position waiting user.

        The user gets a 5 minute claim window. The notified transition is a
        conditional update; if another caller claims the same row first the
        next waiting entry is tried, up to MAX_CLAIM_ATTEMPTS rows.

        Raises:
            SessionNotFoundError: Unknown session
        """
        if not session_id:
            raise ValueError("session_id is required")
        now = now or self.clock.now()

        session = await self.repository.get_session(session_id)
        if not session:
            raise SessionNotFoundError(f"Session not found: {session_id}")

        if not session.has_open_spot:
            logger.info(f"No spots available in session {session_id}, skipping waitlist promotion")
            return PromotionResult(session_id=session_id, promoted=False, reason="session_full")

        entry = await self._claim_next(session_id, now)
        if entry is None:
            return PromotionResult(session_id=session_id, promoted=False, reason="waitlist_empty")

        logger.info(f"Promoted user {entry.user_id} (position {entry.position}) in session {session_id}")

        result = PromotionResult(
            session_id=session_id,
            promoted=True,
            user_id=entry.user_id,
            entry_id=entry.entry_id,
            position=entry.position,
            claim_expires_at=entry.claim_expires_at,
        )
        result.notification_sent = await self._notify(entry, session)

        if self.event_bus:
            await publish_waitlist_promoted(self.event_bus, result)
        return result

    async def process_expired_claims(self, now: Optional[datetime] = None) -> ExpiredClaimsResult:
        """
        Expire lapsed claims and promote the next user once per session.
        """
        now = now or self.clock.now()
        expired_entries = await self.repository.list_expired_claims(now)
        result = ExpiredClaimsResult()

        if not expired_entries:
            logger.debug("No expired waitlist claims found")
            return result

        logger.info(f"Found {len(expired_entries)} expired waitlist claim(s)")
        promoted_sessions: List[str] = []

        for entry in expired_entries:
            try:
                expired = await self.repository.mark_expired(entry.entry_id)
                if expired is None:
                    # claimed just before the sweep
                    continue
                result.expired += 1
                if self.event_bus:
                    await publish_waitlist_claim_expired(self.event_bus, expired)

                if entry.session_id in promoted_sessions:
                    continue

                promotion = await self.promote_next(entry.session_id, now=now)
                promoted_sessions.append(entry.session_id)
                result.promotions.append(promotion)

            except Exception as e:
                result.failed += 1
                logger.error(f"Error processing expired claim {entry.entry_id} (session {entry.session_id}): {e}")

        result.sessions_promoted = len(promoted_sessions)
        logger.info(
            f"Expired {result.expired} waitlist claim(s), re-promoted {result.sessions_promoted} session(s)"
        )
        return result

    async def get_waitlist(self, session_id: str) -> List[WaitlistEntry]:
        return await self.repository.list_entries(session_id)

    # ====================
    # Internal
    # ====================

    async def _claim_next(self, session_id: str, now: datetime) -> Optional[WaitlistEntry]:
        lost: List[str] = []

        for _ in range(MAX_CLAIM_ATTEMPTS):
            candidate = await self.repository.get_next_waiting(session_id, exclude_entry_ids=lost)
            if candidate is None:
                logger.info(f"No one waiting for session {session_id}")
                return None

            claimed = await self.repository.mark_notified(candidate.entry_id, now, now + CLAIM_WINDOW)
            if claimed is not None:
                return claimed

            logger.info(f"Waitlist entry {candidate.entry_id} claimed by another promotion, trying next")
            lost.append(candidate.entry_id)

        logger.warning(f"Gave up promoting session {session_id} after {MAX_CLAIM_ATTEMPTS} lost claims")
        return None

    async def _notify(self, entry: WaitlistEntry, session: ClassSession) -> bool:
        """Email the promoted user; failures leave the promotion in place"""
        if not self.account_client or not self.notification_client:
            return False

        try:
            email = await self.account_client.get_user_email(entry.user_id)
        except Exception as e:
            logger.error(f"Error resolving email for user {entry.user_id}: {e}")
            email = None
        if not email:
            logger.warning(f"No email for user {entry.user_id}, promotion kept without notification")
            return False

        try:
            sent = await self.notification_client.send(
                WAITLIST_NOTIFICATION,
                email,
                {
                    "class_name": session.class_name or "Class",
                    "date": format_session_date(session.session_date),
                    "time": format_session_time(session.start_time),
                },
            )
        except Exception as e:
            logger.error(f"Error sending waitlist notification to {email}: {e}")
            return False

        if sent:
            logger.info(f"Waitlist notification sent to {email}")
        else:
            logger.error(f"Waitlist notification to {email} failed")
        return sent


__all__ = [
    "WaitlistService",
    "CLAIM_WINDOW",
    "MAX_CLAIM_ATTEMPTS",
    "format_session_date",
    "format_session_time",
]
