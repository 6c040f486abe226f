"""Services package"""

from .cart_store import CartStore
from .cart_storage import JsonFileCartStorage
from .checkout_service import CheckoutSession
from .discount_service import DiscountComposer
from .payment_gateway import RazorpayGateway
from .pricing import calculate_totals
from .session_registry import SessionRegistry, StorefrontSession
from .storefront_client import StorefrontAPIClient

__all__ = [
    "CartStore",
    "JsonFileCartStorage",
    "CheckoutSession",
    "DiscountComposer",
    "RazorpayGateway",
    "calculate_totals",
    "SessionRegistry",
    "StorefrontSession",
    "StorefrontAPIClient"
]
