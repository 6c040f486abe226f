"""Tests for checkout submission against a slow order service."""

import asyncio
from decimal import Decimal

import pytest

from conftest import line_item
from app.core.exceptions import CheckoutInProgressError
from app.schemas.order import CheckoutRequest, CheckoutState, OrderConfirmation
from app.services.cart_store import CartStore
from app.services.checkout_service import CheckoutSession
from app.services.discount_service import DiscountComposer


class SlowOrderClient:
    """Holds create_order open until released"""

    def __init__(self):
        self.release = asyncio.Event()
        self.payloads = []

    async def create_order(self, payload):
        self.payloads.append(payload)
        await self.release.wait()
        return OrderConfirmation(
            order_id="64f000000000000000000009",
            order_number="VT-1009",
            total=Decimal(str(payload["total"]))
        )


@pytest.fixture
def cart(storage) -> CartStore:
    return CartStore("session-1", storage)


@pytest.fixture
def checkout_request(shipping_address) -> CheckoutRequest:
    return CheckoutRequest.model_validate({"shippingAddress": shipping_address})


def test_cart_changes_during_submission_survive(cart, storage, checkout_request):
    cart.add_item(line_item("A", 6, 2))
    checkout = CheckoutSession()
    discounts = DiscountComposer()

    async def scenario():
        client = SlowOrderClient()
        pending = asyncio.ensure_future(
            checkout.submit(checkout_request, cart, discounts, client, None)
        )
        await asyncio.sleep(0)
        assert checkout.state == CheckoutState.SUBMITTING

        cart.add_item(line_item("B", 12))
        cart.add_item(line_item("A", 6, 1))
        client.release.set()
        await pending
        return client

    client = asyncio.run(scenario())

    assert checkout.state == CheckoutState.SUCCESS
    ordered = client.payloads[0]["items"]
    assert [(i["product"], i["packSize"], i["quantity"]) for i in ordered] == [("A", 6, 2)]

    remaining = {item.key: item.quantity for item in cart.items}
    assert remaining == {("A", 6): 1, ("B", 12): 1}
    assert {item.key for item in storage.load("session-1")} == {("A", 6), ("B", 12)}


def test_second_submission_while_submitting(cart, checkout_request):
    cart.add_item(line_item())
    checkout = CheckoutSession()
    discounts = DiscountComposer()

    async def scenario():
        client = SlowOrderClient()
        pending = asyncio.ensure_future(
            checkout.submit(checkout_request, cart, discounts, client, None)
        )
        await asyncio.sleep(0)
        with pytest.raises(CheckoutInProgressError):
            await checkout.submit(checkout_request, cart, discounts, client, None)
        client.release.set()
        await pending
        return client

    client = asyncio.run(scenario())

    assert len(client.payloads) == 1
    assert cart.is_empty()
