"""Tests for loyalty tier rules."""

from decimal import Decimal

import pytest

from app.schemas.loyalty import LoyaltyBalance
from app.services.loyalty import points_for_order, summarize, tier_for_points, tier_progress


@pytest.mark.parametrize("tier_points,expected", [
    (0, "bronze"),
    (4999, "bronze"),
    (5000, "silver"),
    (9999, "silver"),
    (10000, "gold"),
    (250000, "gold"),
])
def test_tier_for_points(tier_points, expected):
    assert tier_for_points(tier_points) == expected


@pytest.mark.parametrize("tier,expected", [
    ("bronze", 83),
    ("silver", 124),
    ("gold", 166),
])
def test_points_for_order_by_tier(tier, expected):
    evolv, tier_points = points_for_order(Decimal("832.92"), tier)
    assert evolv == expected
    assert tier_points == 832


def test_unknown_tier_earns_at_bronze_rate():
    assert points_for_order(Decimal("1000"), "platinum") == (100, 1000)


def test_zero_total_earns_nothing():
    assert points_for_order(Decimal("0"), "gold") == (0, 0)


def test_progress_towards_next_tier():
    progress = tier_progress("bronze", 1200)
    assert progress.next_tier == "silver"
    assert progress.points_needed == 3800
    assert progress.progress == 24


def test_gold_is_the_top_tier():
    progress = tier_progress("gold", 15000)
    assert progress.next_tier is None
    assert progress.points_needed == 0
    assert progress.progress == 100


def test_summarize():
    summary = summarize(LoyaltyBalance(points=50, tier="silver", tier_points=6000), Decimal("1000"))
    assert summary.points_to_earn == 150
    assert summary.tier_progress.next_tier == "gold"
    assert summary.tier_progress.points_needed == 4000
