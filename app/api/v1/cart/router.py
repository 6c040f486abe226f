"""Cart router: line items, promo codes and Evolv points"""

from fastapi import APIRouter, Depends, Request

from app.core.config import settings
from app.middleware.rate_limit import limiter
from app.schemas.cart import AddToCartRequest, CartResponse, UpdateQuantityRequest
from app.schemas.discount import ApplyPointsRequest, ApplyPromoRequest
from app.services.session_registry import StorefrontSession
from app.services.storefront_client import StorefrontAPIClient
from app.utils.dependencies import get_storefront_client, get_storefront_session

router = APIRouter()


@router.get("", response_model=CartResponse)
async def get_cart(session: StorefrontSession = Depends(get_storefront_session)):
    """Get cart with drawer totals (no tax)"""
    return session.cart_view()


@router.post("/items", response_model=CartResponse, status_code=201)
async def add_to_cart(
    item_data: AddToCartRequest,
    session: StorefrontSession = Depends(get_storefront_session)
):
    """Add item to cart; an existing product/pack-size line is topped up"""
    session.cart.add_item(item_data.to_line_item())
    return session.cart_view()


@router.put("/items/{product_id}/{pack_size}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    pack_size: int,
    update_data: UpdateQuantityRequest,
    session: StorefrontSession = Depends(get_storefront_session)
):
    """Update cart item quantity; 0 removes the item"""
    session.cart.update_quantity((product_id, pack_size), update_data.quantity)
    return session.cart_view()


@router.delete("/items/{product_id}/{pack_size}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    pack_size: int,
    session: StorefrontSession = Depends(get_storefront_session)
):
    """Remove item from cart"""
    session.cart.remove_item((product_id, pack_size))
    return session.cart_view()


@router.delete("", response_model=CartResponse)
async def clear_cart(session: StorefrontSession = Depends(get_storefront_session)):
    """Clear entire cart along with any discount"""
    session.clear_cart()
    return session.cart_view()


@router.post("/promo", response_model=CartResponse)
@limiter.limit(settings.RATE_LIMIT_PROMO)
async def apply_promo_code(
    request: Request,
    promo_data: ApplyPromoRequest,
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client)
):
    """Validate a promo code; replaces any points redemption"""
    items = session.cart.items
    await session.discounts.apply_promo_code(
        promo_data.code,
        validator=client,
        order_value=session.totals(include_tax=False).subtotal,
        items=[
            {
                "product": item.product_id,
                "quantity": item.quantity,
                "price": float(item.unit_price),
                "total": float(item.line_total)
            }
            for item in items
        ]
    )
    return session.cart_view()


@router.delete("/promo", response_model=CartResponse)
async def remove_promo_code(session: StorefrontSession = Depends(get_storefront_session)):
    session.discounts.remove_promo_code()
    return session.cart_view()


@router.post("/points", response_model=CartResponse)
async def apply_evolv_points(
    points_data: ApplyPointsRequest,
    session: StorefrontSession = Depends(get_storefront_session),
    client: StorefrontAPIClient = Depends(get_storefront_client)
):
    """Redeem Evolv points 1:1; replaces any promo code"""
    await session.discounts.apply_points_redemption(points_data.points, balance_source=client)
    return session.cart_view()


@router.delete("/points", response_model=CartResponse)
async def remove_evolv_points(session: StorefrontSession = Depends(get_storefront_session)):
    session.discounts.remove_points_redemption()
    return session.cart_view()
