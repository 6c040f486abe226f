"""Loyalty router"""

from fastapi import APIRouter, Depends

from app.schemas.loyalty import LoyaltySummary
from app.services import loyalty
from app.services.session_registry import StorefrontSession
from app.services.storefront_client import StorefrontAPIClient
from app.utils.dependencies import get_storefront_client, get_storefront_session

router = APIRouter()


@router.get("", response_model=LoyaltySummary)
async def get_loyalty_summary(
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client)
):
    """Evolv points balance, tier progress and points the current cart would earn"""
    balance = await client.get_loyalty_balance()
    session.discounts.available_points = balance.points
    return loyalty.summarize(balance, session.totals(include_tax=True).total)
