"""Loyalty tier rules: points earned per order and tier progression"""

from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Tuple

from app.schemas.loyalty import LoyaltyBalance, LoyaltySummary, TierProgress

TIER_ORDER = ("bronze", "silver", "gold")

# Tier points needed to reach each tier
TIER_THRESHOLDS: Dict[str, int] = {
    "bronze": 0,
    "silver": 5000,
    "gold": 10000,
}

# Share of the order total returned as Evolv points
EARN_RATES: Dict[str, Decimal] = {
    "bronze": Decimal("0.10"),
    "silver": Decimal("0.15"),
    "gold": Decimal("0.20"),
}


def _floor(amount: Decimal) -> int:
    return int(Decimal(amount).to_integral_value(rounding=ROUND_FLOOR))


def tier_for_points(tier_points: int) -> str:
    """Highest tier whose threshold the customer has reached"""
    tier = TIER_ORDER[0]
    for name in TIER_ORDER:
        if tier_points >= TIER_THRESHOLDS[name]:
            tier = name
    return tier


def points_for_order(order_total: Decimal, tier: str) -> Tuple[int, int]:
    """
    Points an order earns

    Returns:
        (evolv_points, tier_points); tier points accrue 1:1 with the total
    """
    if order_total <= 0:
        return 0, 0
    rate = EARN_RATES.get(tier, EARN_RATES["bronze"])
    return _floor(order_total * rate), _floor(order_total)


def tier_progress(tier: str, tier_points: int) -> TierProgress:
    """Distance to the next tier; gold is the top"""
    if tier not in TIER_ORDER or tier == TIER_ORDER[-1]:
        return TierProgress(current_tier=tier, next_tier=None, points_needed=0, progress=100)

    next_tier = TIER_ORDER[TIER_ORDER.index(tier) + 1]
    target = TIER_THRESHOLDS[next_tier]
    return TierProgress(
        current_tier=tier,
        next_tier=next_tier,
        points_needed=max(0, target - tier_points),
        progress=min(100, (tier_points * 100) // target)
    )


def summarize(balance: LoyaltyBalance, order_total: Decimal) -> LoyaltySummary:
    evolv_points, _ = points_for_order(order_total, balance.tier)
    return LoyaltySummary(
        balance=balance,
        tier_progress=tier_progress(balance.tier, balance.tier_points),
        points_to_earn=evolv_points
    )
