"""Per-session storefront state"""

from collections import OrderedDict
from typing import Optional
import logging

from app.core.config import settings
from app.services.cart_store import CartStore
from app.services.cart_storage import JsonFileCartStorage
from app.services.checkout_service import CheckoutSession
from app.services.discount_service import DiscountComposer
from app.services.pricing import calculate_totals
from app.schemas.cart import CartResponse, OrderTotals

logger = logging.getLogger(__name__)


class StorefrontSession:
    """Cart, discount and checkout state owned by one browser session"""

    def __init__(self, session_id: str, storage: JsonFileCartStorage):
        self.session_id = session_id
        self.cart = CartStore(session_id, storage)
        self.discounts = DiscountComposer()
        self.checkout = CheckoutSession()

    def totals(self, include_tax: bool) -> OrderTotals:
        return calculate_totals(
            self.cart.items,
            self.discounts.discount_amount,
            include_tax=include_tax
        )

    def clear_cart(self) -> None:
        self.cart.clear()
        self.discounts.clear()

    def cart_view(self) -> CartResponse:
        """Cart drawer view; tax is only charged at checkout"""
        return CartResponse(
            items=self.cart.items,
            totals=self.totals(include_tax=False),
            active_discount=self.discounts.active_discount,
            available_points=self.discounts.available_points
        )


class SessionRegistry:
    """
    In-memory map of live sessions

    Least recently used sessions are dropped past ``max_sessions``, except
    those submitting or awaiting payment. Dropped carts survive on disk,
    discounts and checkout progress do not.
    """

    def __init__(self, storage: JsonFileCartStorage, max_sessions: Optional[int] = None):
        self.storage = storage
        self.max_sessions = max_sessions or settings.SESSION_CACHE_SIZE
        self._sessions: "OrderedDict[str, StorefrontSession]" = OrderedDict()

    def get(self, session_id: str) -> StorefrontSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = StorefrontSession(session_id, self.storage)
            self._sessions[session_id] = session
            if len(self._sessions) > self.max_sessions:
                self._evict()
        else:
            self._sessions.move_to_end(session_id)
        return session

    def _evict(self) -> None:
        """Drop the least recently used session that is not mid-checkout"""
        for session_id, session in self._sessions.items():
            checkout = session.checkout
            if not checkout.state_machine.is_busy(checkout.state):
                del self._sessions[session_id]
                logger.info(f"Evicted idle session {session_id}")
                return
        logger.warning(f"All {len(self._sessions)} sessions are mid-checkout; none evicted")

    def __len__(self) -> int:
        return len(self._sessions)
