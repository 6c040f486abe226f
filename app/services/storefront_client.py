"""
HTTP client for the storefront backend (promo, loyalty, orders, payments)
"""

from typing import Any, Callable, Dict, List, Optional
from decimal import Decimal
import logging

import httpx

from app.core.config import settings
from app.core.exceptions import (
    InvalidCodeError,
    NetworkError,
    OrderRejectedError,
    PaymentError,
    StorefrontException,
    UnauthorizedException
)
from app.schemas.discount import PromoDiscount
from app.schemas.loyalty import LoyaltyBalance
from app.schemas.order import OrderConfirmation
from app.services.loyalty import tier_for_points

logger = logging.getLogger(__name__)


def _unwrap(body: Any) -> Any:
    """Accept both bare payloads and {success, data, message} envelopes"""
    if isinstance(body, dict) and "data" in body and isinstance(body["data"], dict):
        return body["data"]
    return body


def _message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        return body.get("message") or body.get("detail") or default
    return default


class StorefrontAPIClient:
    """
    Thin async wrapper around the upstream REST API

    The caller's bearer token is forwarded on every request.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.STOREFRONT_API_URL).rstrip("/")
        self.token = token
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        on_rejected: Callable[[str], StorefrontException],
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Send one request and decode the JSON body

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            on_rejected: Builds the exception for 4xx responses
            json: Request body

        Returns:
            Decoded response payload (envelope removed)
        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.request(method, url, json=json, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out: {str(e)}")
            raise NetworkError("The store service took too long to respond. Please try again.")
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise NetworkError()

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 500:
            logger.error(f"{method} {path} returned {response.status_code}")
            raise NetworkError()
        if response.status_code == 401:
            raise UnauthorizedException(_message(body, "Please login to continue"))
        if response.status_code >= 400:
            raise on_rejected(_message(body, f"Request failed ({response.status_code})"))
        if body is None:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise NetworkError("The store service sent an unreadable response.")

        return _unwrap(body)

    async def validate_promo(
        self,
        code: str,
        order_value: Decimal,
        items: List[Dict[str, Any]]
    ) -> PromoDiscount:
        """Validate promo code and get its discount for this order value"""
        data = await self._request(
            "POST",
            settings.PROMO_VALIDATE_PATH,
            on_rejected=InvalidCodeError,
            json={"code": code, "orderValue": float(order_value), "items": items}
        )
        return PromoDiscount(
            code=data.get("code") or code,
            discount_amount=Decimal(str(data.get("discountAmount", 0))),
            description=data.get("description") or "",
            discount_type=data.get("discountType"),
            discount_value=data.get("discountValue")
        )

    async def get_loyalty_balance(self) -> LoyaltyBalance:
        """Current Evolv points, tier and tier points"""
        data = await self._request(
            "GET",
            settings.LOYALTY_BALANCE_PATH,
            on_rejected=lambda message: StorefrontException(400, message, "LOYALTY_UNAVAILABLE")
        )
        tier_points = int(data.get("tierPoints", data.get("loyaltyPoints", 0)) or 0)
        return LoyaltyBalance(
            points=int(data.get("points", data.get("evolvPoints", 0)) or 0),
            tier=data.get("tier") or data.get("loyaltyTier") or tier_for_points(tier_points),
            tier_points=tier_points
        )

    async def create_order(self, payload: Dict[str, Any]) -> OrderConfirmation:
        """Place the order with the order service"""
        data = await self._request(
            "POST",
            settings.ORDERS_PATH,
            on_rejected=OrderRejectedError,
            json=payload
        )
        order = data.get("order") or {}
        loyalty = data.get("loyalty") or {}
        order_id = order.get("_id") or order.get("id")
        if not order_id:
            logger.error("Order service response has no order id")
            raise NetworkError("The store service sent an unreadable response.")

        return OrderConfirmation(
            order_id=str(order_id),
            order_number=order.get("orderNumber"),
            status=order.get("status") or "pending",
            total=Decimal(str(order.get("total", payload.get("total", 0)))),
            points_earned=int(data.get("pointsEarned", loyalty.get("pointsEarned", 0)) or 0),
            new_tier=data.get("newTier") or loyalty.get("newTier")
        )

    async def confirm_payment(
        self,
        order_id: str,
        gateway_order_id: str,
        payment_id: str,
        signature: str
    ) -> Dict[str, Any]:
        """Tell the order service the payment was captured"""
        return await self._request(
            "POST",
            settings.PAYMENT_VERIFY_PATH,
            on_rejected=PaymentError,
            json={
                "orderId": order_id,
                "razorpayOrderId": gateway_order_id,
                "razorpayPaymentId": payment_id,
                "razorpaySignature": signature
            }
        )

    async def report_payment_failure(self, order_id: str, reason: str) -> None:
        """Record a failed or cancelled payment against the order"""
        await self._request(
            "POST",
            settings.PAYMENT_FAILED_PATH,
            on_rejected=lambda message: StorefrontException(400, message, "PAYMENT_FAILURE_NOT_RECORDED"),
            json={"orderId": order_id, "error": reason}
        )
