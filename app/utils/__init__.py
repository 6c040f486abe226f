"""Utilities package"""

from .dependencies import (
    get_bearer_token,
    get_payment_gateway,
    get_storefront_client,
    get_storefront_session,
    require_bearer_token
)

__all__ = [
    "get_bearer_token",
    "get_payment_gateway",
    "get_storefront_client",
    "get_storefront_session",
    "require_bearer_token"
]
