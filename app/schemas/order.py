"""
Checkout and order schemas
"""

from pydantic import BaseModel, EmailStr, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List, Dict, Any
from decimal import Decimal
import enum

from app.schemas.cart import OrderTotals
from app.schemas.payment import PaymentIntent

# The order service expects JSON numbers for money
WireMoney = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class PaymentMethod(str, enum.Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    WALLET = "wallet"

    @property
    def is_online(self) -> bool:
        return self is not PaymentMethod.CASH_ON_DELIVERY


class CheckoutState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_COMPLETE = "payment_complete"
    PAYMENT_FAILED = "payment_failed"
    ORDER_FAILED = "order_failed"


class Address(BaseModel):
    """Shipping or billing address; every field is required"""
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=r'^(\+91[\s-]?)?[6-9]\d{4}[\s-]?\d{5}$')
    street: str = Field(..., max_length=500)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., pattern=r'^\d{6}$')
    country: str = Field("India", max_length=100)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("first_name", "last_name", "street", "city", "state", "country")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v


class CheckoutRequest(BaseModel):
    """Schema for order submission"""
    shipping_address: Address
    billing_address: Optional[Address] = None
    same_as_shipping: bool = True
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @model_validator(mode="after")
    def billing_required_when_different(self):
        if not self.same_as_shipping and self.billing_address is None:
            raise ValueError("billing_address is required when it differs from shipping")
        return self

    @property
    def effective_billing_address(self) -> Address:
        if self.same_as_shipping or self.billing_address is None:
            return self.shipping_address
        return self.billing_address


class OrderItemPayload(BaseModel):
    product: str
    quantity: int
    price: WireMoney
    pack_size: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OrderPayload(BaseModel):
    """Body posted to the order service"""
    items: List[OrderItemPayload]
    shipping_address: Address
    billing_address: Address
    payment: Dict[str, Any]
    subtotal: WireMoney
    shipping_cost: WireMoney
    tax: WireMoney
    discount: WireMoney
    total: WireMoney
    promo_code: Optional[str] = None
    evolv_points_to_redeem: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OrderConfirmation(BaseModel):
    """What the order service returns for a placed order"""
    order_id: str
    order_number: Optional[str] = None
    status: str = "pending"
    total: Decimal
    points_earned: int = 0
    new_tier: Optional[str] = None


class CheckoutQuote(BaseModel):
    """Checkout totals with tax plus the loyalty preview"""
    totals: OrderTotals
    points_to_earn: Optional[int] = None


class CheckoutResponse(BaseModel):
    """Checkout session snapshot"""
    state: CheckoutState
    order: Optional[OrderConfirmation] = None
    payment_intent: Optional[PaymentIntent] = None
    error: Optional[str] = None
