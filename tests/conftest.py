"""Shared pytest fixtures for storefront tests."""

import hashlib
import hmac
import json
import os
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.schemas.cart import CartLineItem
from app.services.cart_storage import JsonFileCartStorage
from app.services.payment_gateway import RazorpayGateway
from app.services.session_registry import SessionRegistry

RAZORPAY_KEY_ID = "rzp_test_key"
RAZORPAY_KEY_SECRET = "rzp_test_secret"


def line_item(
    product_id: str = "A",
    pack_size: int = 6,
    quantity: int = 1,
    unit_price: str = "799"
) -> CartLineItem:
    return CartLineItem(
        product_id=product_id,
        pack_size=pack_size,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        name=f"Product {product_id}"
    )


def sign(gateway_order_id: str, payment_id: str, secret: str = RAZORPAY_KEY_SECRET) -> str:
    """Signature the payment sheet hands back on success"""
    return hmac.new(
        secret.encode("utf-8"),
        f"{gateway_order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


class FakeUpstream:
    """Stands in for the order/promo/loyalty backend behind httpx.MockTransport"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Any] = {}

    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Optional[Any] = None,
        error: Optional[type] = None
    ) -> None:
        self.routes[(method, path)] = (status, json, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for (method, path), (status, body, error) in self.routes.items():
            if request.method == method and request.url.path.endswith(path):
                if error is not None:
                    raise error("upstream unavailable", request=request)
                return httpx.Response(status, json=body)
        return httpx.Response(404, json={"success": False, "message": "Not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    def last_json(self, path: str) -> Dict[str, Any]:
        return json.loads(self.calls(path)[-1].content)


@pytest.fixture
def storage(tmp_path) -> JsonFileCartStorage:
    return JsonFileCartStorage(str(tmp_path / "carts"))


@pytest.fixture
def upstream() -> FakeUpstream:
    fake = FakeUpstream()
    fake.respond("GET", settings.LOYALTY_BALANCE_PATH, json={
        "success": True,
        "data": {"points": 50, "tier": "bronze", "tierPoints": 1200}
    })
    fake.respond("POST", settings.PROMO_VALIDATE_PATH, json={
        "success": True,
        "data": {"code": "SAVE10", "description": "10% off", "discountType": "percentage",
                 "discountValue": 10, "discountAmount": 80}
    })
    fake.respond("POST", settings.ORDERS_PATH, status=201, json={
        "success": True,
        "message": "Order placed successfully",
        "data": {
            "order": {"_id": "64f000000000000000000001", "orderNumber": "VT-1001",
                      "status": "pending", "total": 832.92},
            "loyalty": {"pointsEarned": 832, "newTier": "bronze"}
        }
    })
    fake.respond("POST", settings.PAYMENT_VERIFY_PATH, json={
        "success": True, "data": {"status": "paid"}
    })
    fake.respond("POST", settings.PAYMENT_FAILED_PATH, json={"success": True})
    return fake


@pytest.fixture
def gateway(monkeypatch) -> RazorpayGateway:
    gateway = RazorpayGateway(key_id=RAZORPAY_KEY_ID, key_secret=RAZORPAY_KEY_SECRET)
    created = []

    def fake_create(data=None, **kwargs):
        created.append(data)
        return {"id": f"order_rzp_{len(created)}", "amount": data["amount"],
                "currency": data["currency"], "status": "created"}

    monkeypatch.setattr(gateway.client.order, "create", fake_create)
    gateway.created_orders = created
    return gateway


@pytest.fixture
def api_client(storage, upstream, gateway) -> TestClient:
    app.state.sessions = SessionRegistry(storage)
    app.state.upstream_transport = upstream.transport
    app.state.payment_gateway = gateway
    return TestClient(app, headers={"Authorization": "Bearer customer-token"})


@pytest.fixture
def anonymous_client(api_client) -> TestClient:
    return TestClient(app)


@pytest.fixture
def shipping_address() -> Dict[str, str]:
    return {
        "firstName": "Asha",
        "lastName": "Rao",
        "email": "asha.rao@vitalsmail.in",
        "phone": "+91 98765 43210",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zipCode": "560001",
        "country": "India"
    }
