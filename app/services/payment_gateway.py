"""
Razorpay payment gateway integration
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import razorpay
from razorpay.errors import SignatureVerificationError

from app.core.config import settings
from app.core.exceptions import PaymentError
from app.schemas.payment import PaymentIntent

logger = logging.getLogger(__name__)


def to_paise(amount: Decimal) -> int:
    """Convert rupees to the smallest currency unit"""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayGateway:
    """Razorpay API client wrapper"""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        currency: Optional[str] = None
    ):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.currency = currency or settings.PAYMENT_CURRENCY
        self.client = razorpay.Client(
            auth=(self.key_id, key_secret or settings.RAZORPAY_KEY_SECRET)
        )

    def create_payment_intent(
        self,
        order_id: str,
        amount: Decimal,
        order_number: Optional[str] = None
    ) -> PaymentIntent:
        """
        Create a Razorpay order for a placed storefront order

        Args:
            order_id: Storefront order ID
            amount: Amount in rupees
            order_number: Human-readable order number for the sheet

        Returns:
            PaymentIntent for the client-side payment sheet
        """
        amount_paise = to_paise(amount)
        if amount_paise <= 0:
            raise PaymentError("Nothing to pay for this order", error_code="NOTHING_TO_PAY")

        order_data: Dict[str, Any] = {
            "amount": amount_paise,
            "currency": self.currency,
            "receipt": f"order_{order_id}",
            "notes": {"order_id": order_id},
            "payment_capture": 1
        }

        try:
            gateway_order = self.client.order.create(data=order_data)
        except Exception as e:
            logger.error(f"Failed to create payment order: {str(e)}")
            raise PaymentError("Failed to create payment order")

        return PaymentIntent(
            order_id=order_id,
            gateway_order_id=gateway_order["id"],
            amount=amount_paise,
            currency=self.currency,
            key_id=self.key_id,
            merchant_name=settings.PAYMENT_MERCHANT_NAME,
            description=f"Order #{order_number or order_id}"
        )

    def verify_payment_signature(
        self,
        gateway_order_id: str,
        payment_id: str,
        signature: str
    ) -> bool:
        """
        Verify payment signature

        Returns:
            True if signature is valid
        """
        params_dict = {
            "razorpay_order_id": gateway_order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature
        }
        try:
            self.client.utility.verify_payment_signature(params_dict)
        except SignatureVerificationError:
            logger.warning(f"Invalid payment signature for {gateway_order_id}")
            return False
        return True
