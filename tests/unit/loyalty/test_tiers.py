"""Unit tests for tier resolution and referral codes."""

from decimal import Decimal

import pytest

from modules.loyalty.constants import REFERRAL_CODE_ALPHABET, REFERRAL_CODE_LENGTH
from modules.loyalty.models import LoyaltyTier
from modules.loyalty.services import generate_referral_code, tier_for

pytestmark = pytest.mark.unit


@pytest.fixture()
def tiers():
    return [
        LoyaltyTier(name="Bronze", min_points=0, multiplier=Decimal("1")),
        LoyaltyTier(name="Silver", min_points=500, multiplier=Decimal("1.5")),
        LoyaltyTier(name="Gold", min_points=2000, multiplier=Decimal("2")),
        LoyaltyTier(name="Platinum", min_points=5000, multiplier=Decimal("3")),
    ]


class TestTierFor:
    @pytest.mark.parametrize(
        ("total", "current", "upcoming"),
        [
            (0, "Bronze", "Silver"),
            (499, "Bronze", "Silver"),
            (500, "Silver", "Gold"),
            (2500, "Gold", "Platinum"),
        ],
    )
    def test_current_and_next(self, tiers, total, current, upcoming):
        tier, following = tier_for(total, tiers)
        assert tier.name == current
        assert following.name == upcoming

    def test_top_tier_has_no_next(self, tiers):
        tier, following = tier_for(12000, tiers)
        assert tier.name == "Platinum"
        assert following is None


class TestReferralCode:
    def test_length_and_alphabet(self):
        code = generate_referral_code()
        assert len(code) == REFERRAL_CODE_LENGTH
        assert set(code) <= set(REFERRAL_CODE_ALPHABET)

    def test_ambiguous_characters_excluded(self):
        assert not set("01IO") & set(REFERRAL_CODE_ALPHABET)
