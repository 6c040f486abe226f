"""API v1 routes aggregation"""

from fastapi import APIRouter

from .cart.router import router as cart_router
from .checkout.router import router as checkout_router
from .loyalty.router import router as loyalty_router

# Create v1 router
api_router = APIRouter()

api_router.include_router(cart_router, prefix="/cart", tags=["Cart"])
api_router.include_router(checkout_router, prefix="/checkout", tags=["Checkout"])
api_router.include_router(loyalty_router, prefix="/loyalty", tags=["Loyalty"])
