"""
Common dependencies for FastAPI
"""

from typing import Optional
import uuid

from fastapi import Depends, Header, Request

from app.core.exceptions import UnauthorizedException
from app.services.payment_gateway import RazorpayGateway
from app.services.session_registry import StorefrontSession
from app.services.storefront_client import StorefrontAPIClient

SESSION_KEY = "session_id"


def get_storefront_session(request: Request) -> StorefrontSession:
    """
    Get the cart/checkout state for this browser session

    A session id is issued on first use and kept in the signed session cookie.
    """
    session_id = request.session.get(SESSION_KEY)
    if not session_id:
        session_id = uuid.uuid4().hex
        request.session[SESSION_KEY] = session_id
    return request.app.state.sessions.get(session_id)


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the customer's token, if any"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_bearer_token(token: Optional[str] = Depends(get_bearer_token)) -> str:
    """Customer must be logged in"""
    if not token:
        raise UnauthorizedException("Please login to continue")
    return token


def get_storefront_client(
    request: Request,
    token: str = Depends(require_bearer_token)
) -> StorefrontAPIClient:
    """Upstream client acting on behalf of the logged-in customer"""
    return StorefrontAPIClient(
        token=token,
        transport=request.app.state.upstream_transport
    )


def get_payment_gateway(request: Request) -> Optional[RazorpayGateway]:
    """Configured gateway, or None when online payments are disabled"""
    return request.app.state.payment_gateway
