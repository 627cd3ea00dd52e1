# salon_booking/services/membership.py
"""
Customer tier policy and loyalty point arithmetic.

Pure functions: no session, no I/O. The status flow and the profile
read path call them to decide what to persist.
"""

from decimal import ROUND_FLOOR, Decimal
from typing import Union

from ..core.config import settings
from ..models.customer import MembershipTier

SILVER_THRESHOLD = 10
GOLD_THRESHOLD = 50


def tier_for(confirmed_or_completed_count: int) -> MembershipTier:
    """
    Membership tier for a number of confirmed plus completed bookings.

    bronze below 10, silver from 10 to 49, gold from 50.
    """
    if confirmed_or_completed_count < 0:
        raise ValueError("Booking count cannot be negative")
    if confirmed_or_completed_count >= GOLD_THRESHOLD:
        return MembershipTier.GOLD
    if confirmed_or_completed_count >= SILVER_THRESHOLD:
        return MembershipTier.SILVER
    return MembershipTier.BRONZE


def loyalty_points_for(
    total_price: Union[Decimal, int, str], divisor: int = settings.loyalty_points_divisor
) -> int:
    """Points earned by completing a booking: ``floor(total_price / divisor)``."""
    amount = Decimal(str(total_price))
    if amount < 0:
        raise ValueError("Booking total cannot be negative")
    return int((amount / Decimal(divisor)).to_integral_value(rounding=ROUND_FLOOR))
