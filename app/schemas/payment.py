"""
Payment schemas for the Razorpay handshake
"""

from pydantic import BaseModel, Field
from typing import Optional


class PaymentIntent(BaseModel):
    """Everything the client-side payment sheet needs"""
    order_id: str = Field(..., description="Storefront order ID")
    gateway_order_id: str = Field(..., description="Razorpay order ID")
    amount: int = Field(..., description="Amount in paise")
    currency: str = "INR"
    key_id: str
    merchant_name: str = ""
    description: Optional[str] = None


class PaymentVerificationRequest(BaseModel):
    """Fields returned by the payment sheet's success handler"""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentFailureRequest(BaseModel):
    """Sheet dismissed or gateway error"""
    reason: str = Field(default="Payment cancelled by user", max_length=500)
