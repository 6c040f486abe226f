"""
Loyalty schemas
"""

from pydantic import BaseModel
from typing import Optional


class LoyaltyBalance(BaseModel):
    """Balance as reported by the loyalty service"""
    points: int = 0
    tier: str = "bronze"
    tier_points: int = 0


class TierProgress(BaseModel):
    current_tier: str
    next_tier: Optional[str] = None
    points_needed: int = 0
    progress: int = 100


class LoyaltySummary(BaseModel):
    balance: LoyaltyBalance
    tier_progress: TierProgress
    points_to_earn: int = 0
