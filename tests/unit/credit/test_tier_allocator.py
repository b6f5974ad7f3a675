"""
Tier credit allocation - Unit Tests
"""

import pytest

from microservices.credit_service.models import CreditType, MembershipTier
from microservices.credit_service.tier_allocator import TIER_CREDIT_BUNDLES, allocate, resolve_tier

pytestmark = [pytest.mark.unit]


class TestResolveTier:

    @pytest.mark.parametrize("label, expected", [
        ("Gold Membership", MembershipTier.GOLD),
        ("gold", MembershipTier.GOLD),
        ("  PLATINUM membership ", MembershipTier.PLATINUM),
        ("Diamond Membership", MembershipTier.DIAMOND),
        ("Silver Membership", MembershipTier.SILVER),
        ("Founding Gold", MembershipTier.GOLD),
    ])
    def test_known_labels(self, label, expected):
        assert resolve_tier(label) == expected

    @pytest.mark.parametrize("label", [None, "", "   ", "Bronze Membership", "membership"])
    def test_unknown_labels_resolve_to_silver(self, label):
        assert resolve_tier(label) == MembershipTier.SILVER


class TestAllocate:

    def test_gold_bundle(self):
        bundle = allocate("Gold Membership")
        assert (bundle.class_credits, bundle.red_light_credits, bundle.dry_cryo_credits) == (0, 4, 2)

    def test_platinum_bundle(self):
        bundle = allocate("Platinum Membership")
        assert (bundle.class_credits, bundle.red_light_credits, bundle.dry_cryo_credits) == (0, 6, 4)

    def test_diamond_bundle(self):
        bundle = allocate("Diamond Membership")
        assert (bundle.class_credits, bundle.red_light_credits, bundle.dry_cryo_credits) == (10, 10, 6)

    def test_silver_gets_nothing(self):
        bundle = allocate("Silver Membership")
        assert all(bundle.for_type(t) == 0 for t in CreditType)

    def test_every_tier_has_a_bundle(self):
        assert set(TIER_CREDIT_BUNDLES) == set(MembershipTier)

    def test_returned_bundle_is_a_copy(self):
        bundle = allocate("gold")
        bundle.red_light_credits = 99
        assert allocate("gold").red_light_credits == 4

    def test_for_type(self):
        bundle = allocate("diamond")
        assert bundle.for_type(CreditType.CLASS) == 10
        assert bundle.for_type(CreditType.RED_LIGHT) == 10
        assert bundle.for_type(CreditType.DRY_CRYO) == 6
