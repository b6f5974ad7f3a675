"""
Tier credit allocation

Maps a membership type label (as stored on the member, e.g. "Gold Membership")
to the fixed monthly credit bundle of its tier.
"""

from typing import Optional

from .models import MembershipTier, TierCreditBundle

TIER_CREDIT_BUNDLES = {
    MembershipTier.SILVER: TierCreditBundle(class_credits=0, red_light_credits=0, dry_cryo_credits=0),
    MembershipTier.GOLD: TierCreditBundle(class_credits=0, red_light_credits=4, dry_cryo_credits=2),
    MembershipTier.PLATINUM: TierCreditBundle(class_credits=0, red_light_credits=6, dry_cryo_credits=4),
    MembershipTier.DIAMOND: TierCreditBundle(class_credits=10, red_light_credits=10, dry_cryo_credits=6),
}

# Checked in order; first contained name wins
_TIER_MATCH_ORDER = (
    MembershipTier.DIAMOND,
    MembershipTier.PLATINUM,
    MembershipTier.GOLD,
)

_SUFFIX = " membership"


def resolve_tier(tier_name: Optional[str]) -> MembershipTier:
    """
    Normalize a membership type label to a tier.

    Unknown, empty or missing labels resolve to silver.
    """
    normalized = (tier_name or "").strip().lower()
    if normalized.endswith(_SUFFIX):
        normalized = normalized[: -len(_SUFFIX)].strip()

    for tier in _TIER_MATCH_ORDER:
        if tier.value in normalized:
            return tier
    return MembershipTier.SILVER


def allocate(tier_name: Optional[str]) -> TierCreditBundle:
    """Monthly credit bundle for a membership type label. Never raises."""
    return TIER_CREDIT_BUNDLES[resolve_tier(tier_name)].model_copy()


__all__ = ["TIER_CREDIT_BUNDLES", "resolve_tier", "allocate"]
