"""Tier policy and loyalty point arithmetic."""

from decimal import Decimal

import pytest

from salon_booking.models.customer import MembershipTier
from salon_booking.services.membership import loyalty_points_for, tier_for


class TestTierFor:
    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, MembershipTier.BRONZE),
            (9, MembershipTier.BRONZE),
            (10, MembershipTier.SILVER),
            (49, MembershipTier.SILVER),
            (50, MembershipTier.GOLD),
            (500, MembershipTier.GOLD),
        ],
    )
    def test_thresholds(self, count, expected):
        assert tier_for(count) is expected

    def test_is_deterministic(self):
        assert tier_for(25) == tier_for(25)

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            tier_for(-1)


class TestLoyaltyPointsFor:
    def test_floor_of_total_over_ten_thousand(self):
        assert loyalty_points_for(Decimal("125000")) == 12

    def test_below_one_point(self):
        assert loyalty_points_for(Decimal("9999.99")) == 0

    def test_exact_multiple(self):
        assert loyalty_points_for(80000) == 8

    def test_accepts_numeric_strings(self):
        assert loyalty_points_for("30000.00") == 3

    def test_custom_divisor(self):
        assert loyalty_points_for(Decimal("125000"), divisor=1000) == 125

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            loyalty_points_for(Decimal("-1"))
