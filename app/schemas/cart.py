"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple
from decimal import Decimal

from app.schemas.discount import ActiveDiscount


CartKey = Tuple[str, int]


class CartLineItem(BaseModel):
    """One product/pack-size line in the cart"""
    product_id: str = Field(..., min_length=1, description="Product ID")
    pack_size: int = Field(..., ge=1, description="Bottles per pack")
    quantity: int = Field(..., ge=1, description="Number of packs")
    unit_price: Decimal = Field(..., ge=0, description="Price of one pack")
    name: str = Field(default="", description="Display name")
    image: Optional[str] = Field(None, description="Image reference")

    @field_validator("product_id")
    @classmethod
    def strip_product_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_id cannot be blank")
        return v

    @property
    def key(self) -> CartKey:
        return (self.product_id, self.pack_size)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class AddToCartRequest(BaseModel):
    """Schema for add to cart request"""
    product_id: str = Field(..., min_length=1, description="Product ID")
    pack_size: int = Field(..., ge=1, description="Bottles per pack")
    quantity: int = Field(default=1, ge=1, description="Quantity to add")
    unit_price: Decimal = Field(..., ge=0, description="Price of one pack")
    name: str = ""
    image: Optional[str] = None

    def to_line_item(self) -> CartLineItem:
        return CartLineItem(**self.model_dump())


class UpdateQuantityRequest(BaseModel):
    """Schema for updating cart item quantity; 0 removes the item"""
    quantity: int = Field(..., description="New quantity")


class OrderTotals(BaseModel):
    """Derived totals; recomputed on every cart or discount change"""
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    discount: Decimal = Field(default=Decimal("0"))
    total: Decimal
    item_count: int = 0
    amount_to_free_shipping: Decimal = Field(default=Decimal("0"))


class CartResponse(BaseModel):
    """Schema for cart response"""
    items: List[CartLineItem]
    totals: OrderTotals
    active_discount: Optional[ActiveDiscount] = None
    available_points: Optional[int] = None
