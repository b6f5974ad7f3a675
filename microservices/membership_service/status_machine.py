"""
Member status state machine

pending_activation -> active -> {past_due, frozen, cancelled}
past_due -> {active, cancelled}
frozen -> {active, cancelled}
cancelled is terminal.
"""

from typing import Dict, FrozenSet, Optional

from .models import MemberStatus
from .protocols import InvalidStatusTransitionError

ALLOWED_TRANSITIONS: Dict[MemberStatus, FrozenSet[MemberStatus]] = {
    MemberStatus.PENDING_ACTIVATION: frozenset({MemberStatus.ACTIVE}),
    MemberStatus.ACTIVE: frozenset({
        MemberStatus.PAST_DUE,
        MemberStatus.FROZEN,
        MemberStatus.CANCELLED,
    }),
    MemberStatus.PAST_DUE: frozenset({MemberStatus.ACTIVE, MemberStatus.CANCELLED}),
    MemberStatus.FROZEN: frozenset({MemberStatus.ACTIVE, MemberStatus.CANCELLED}),
    MemberStatus.CANCELLED: frozenset(),
}

# Payment processor subscription status -> member status
SUBSCRIPTION_STATUS_MAP: Dict[str, MemberStatus] = {
    "active": MemberStatus.ACTIVE,
    "past_due": MemberStatus.PAST_DUE,
    "unpaid": MemberStatus.PAST_DUE,
    "canceled": MemberStatus.CANCELLED,
    "cancelled": MemberStatus.CANCELLED,
}


def can_transition(current: MemberStatus, target: MemberStatus) -> bool:
    """Re-applying the current status counts as allowed (no-op)"""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def assert_transition(current: MemberStatus, target: MemberStatus) -> None:
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(
            f"Cannot change member status from {current.value} to {target.value}",
            current_status=current.value,
            target_status=target.value,
        )


def map_subscription_status(external_status: Optional[str]) -> Optional[MemberStatus]:
    """None for statuses that do not drive a member change (trialing, incomplete, ...)"""
    if not external_status:
        return None
    return SUBSCRIPTION_STATUS_MAP.get(external_status.strip().lower())


__all__ = [
    "ALLOWED_TRANSITIONS",
    "SUBSCRIPTION_STATUS_MAP",
    "can_transition",
    "assert_transition",
    "map_subscription_status",
]
