"""
Discount schemas: promo codes and Evolv points redemption

Only one discount can be active on a cart, so the active discount is a
tagged union on ``kind`` rather than two nullable fields.
"""

from pydantic import BaseModel, Field
from typing import Annotated, Optional, Literal, Union
from decimal import Decimal


class PromoDiscount(BaseModel):
    """Promo code validated by the promo service"""
    kind: Literal["promo"] = "promo"
    code: str
    discount_amount: Decimal = Field(..., ge=0)
    description: str = ""
    discount_type: Optional[Literal["percentage", "fixed"]] = None
    discount_value: Optional[Decimal] = None


class PointsDiscount(BaseModel):
    """Evolv points redeemed against the order"""
    kind: Literal["points"] = "points"
    points_to_redeem: int = Field(..., ge=1)
    discount_amount: Decimal = Field(..., ge=0)


ActiveDiscount = Annotated[
    Union[PromoDiscount, PointsDiscount],
    Field(discriminator="kind")
]


class ApplyPromoRequest(BaseModel):
    """Schema for promo code application"""
    code: str = Field(..., description="Promo code to apply")


class ApplyPointsRequest(BaseModel):
    """Schema for points redemption; range checks happen in the composer"""
    points: int = Field(..., description="Evolv points to redeem")
