"""Checkout router: quote, order submission and payment handshake"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.order import CheckoutQuote, CheckoutRequest, CheckoutResponse
from app.schemas.payment import PaymentFailureRequest, PaymentVerificationRequest
from app.services import loyalty
from app.services.payment_gateway import RazorpayGateway
from app.services.session_registry import StorefrontSession
from app.services.storefront_client import StorefrontAPIClient
from app.utils.dependencies import (
    get_payment_gateway,
    get_storefront_client,
    get_storefront_session
)

router = APIRouter()


@router.get("", response_model=CheckoutResponse)
async def get_checkout_state(session: StorefrontSession = Depends(get_storefront_session)):
    """Current checkout state and last error, if any"""
    return session.checkout.snapshot()


@router.get("/quote", response_model=CheckoutQuote)
async def get_checkout_quote(
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client)
):
    """Checkout totals with tax and the Evolv points the order would earn"""
    totals = session.totals(include_tax=True)
    balance = await client.get_loyalty_balance()
    points_to_earn, _ = loyalty.points_for_order(totals.total, balance.tier)
    return CheckoutQuote(totals=totals, points_to_earn=points_to_earn)


@router.post("", response_model=CheckoutResponse, status_code=201)
async def submit_order(
    checkout_data: CheckoutRequest,
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client),
    gateway: Optional[RazorpayGateway] = Depends(get_payment_gateway)
):
    """Place the order; online methods return a payment intent"""
    return await session.checkout.submit(
        checkout_data,
        cart=session.cart,
        discounts=session.discounts,
        client=client,
        gateway=gateway
    )


@router.post("/payment/verify", response_model=CheckoutResponse)
async def verify_payment(
    verification: PaymentVerificationRequest,
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client),
    gateway: Optional[RazorpayGateway] = Depends(get_payment_gateway)
):
    """Verify the gateway signature and confirm the capture"""
    return await session.checkout.verify_payment(verification, client=client, gateway=gateway)


@router.post("/payment/failure", response_model=CheckoutResponse)
async def record_payment_failure(
    failure: PaymentFailureRequest,
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client)
):
    """Payment sheet dismissed or failed; the order stays unpaid"""
    return await session.checkout.fail_payment(failure.reason, client=client)


@router.post("/payment/retry", response_model=CheckoutResponse)
async def retry_payment(
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client),
    gateway: Optional[RazorpayGateway] = Depends(get_payment_gateway)
):
    """Create a new payment intent for the unpaid order"""
    return await session.checkout.retry_payment(client=client, gateway=gateway)
