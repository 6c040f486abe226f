"""
Cart service for managing cart operations
"""

from typing import Iterable, List, Optional
import logging

from app.core.config import settings
from app.core.exceptions import (
    CartItemNotFoundError,
    InvalidQuantityError,
    StorageError
)
from app.schemas.cart import CartKey, CartLineItem
from app.services.cart_storage import JsonFileCartStorage

logger = logging.getLogger(__name__)


class CartStore:
    """
    Line items for one session

    Loaded once on construction. Every mutation works on a copy of the
    lines, writes it to storage and only then replaces the in-memory cart,
    so a failed write leaves the cart as it was. Items with quantity 0 are
    removed, never stored.
    """

    def __init__(
        self,
        session_key: str,
        storage: JsonFileCartStorage,
        max_quantity: Optional[int] = None
    ):
        self.session_key = session_key
        self.storage = storage
        self.max_quantity = max_quantity or settings.MAX_ITEM_QUANTITY
        self._items: List[CartLineItem] = self._load()

    def _load(self) -> List[CartLineItem]:
        try:
            items = self.storage.load(self.session_key)
        except StorageError as e:
            logger.warning(f"Discarding corrupt cart for session {self.session_key}: {str(e)}")
            return []

        # Merge duplicates and clamp quantities so stored data obeys the invariants
        merged: List[CartLineItem] = []
        for item in items:
            existing = self._find(item.key, merged)
            if existing is not None:
                existing.quantity = self._clamp(existing.quantity + item.quantity)
            else:
                item.quantity = self._clamp(item.quantity)
                merged.append(item)
        return merged

    def _commit(self, items: List[CartLineItem]) -> None:
        self.storage.save(self.session_key, items)
        self._items = items

    def _clamp(self, quantity: int) -> int:
        return min(quantity, self.max_quantity)

    @staticmethod
    def _find(key: CartKey, items: List[CartLineItem]) -> Optional[CartLineItem]:
        for item in items:
            if item.key == key:
                return item
        return None

    @property
    def items(self) -> List[CartLineItem]:
        """Copies, so callers cannot bypass the invariants"""
        return [item.model_copy() for item in self._items]

    def is_empty(self) -> bool:
        return not self._items

    def add_item(self, item: CartLineItem) -> CartLineItem:
        """
        Add item to cart or increase quantity if the key exists
        """
        items = self.items
        existing = self._find(item.key, items)
        if existing is not None:
            requested = existing.quantity + item.quantity
            existing.quantity = self._clamp(requested)
            if requested > self.max_quantity:
                logger.info(f"Clamped {item.key} to {self.max_quantity} packs")
            result = existing
        else:
            result = item.model_copy(update={"quantity": self._clamp(item.quantity)})
            items.append(result)

        self._commit(items)
        return result.model_copy()

    def update_quantity(self, key: CartKey, new_quantity: int) -> Optional[CartLineItem]:
        """
        Replace an item's quantity; 0 removes it
        """
        if new_quantity < 0:
            raise InvalidQuantityError(new_quantity)
        if new_quantity == 0:
            self.remove_item(key)
            return None

        items = self.items
        existing = self._find(key, items)
        if existing is None:
            raise CartItemNotFoundError(*key)

        existing.quantity = self._clamp(new_quantity)
        self._commit(items)
        return existing.model_copy()

    def remove_item(self, key: CartKey) -> bool:
        """Remove item from cart; no-op when absent"""
        remaining = [item for item in self.items if item.key != key]
        if len(remaining) == len(self._items):
            return False

        self._commit(remaining)
        return True

    def remove_ordered(self, ordered: Iterable[CartLineItem]) -> None:
        """
        Take ordered quantities out of the cart

        Lines added while the order was being placed stay in the cart.
        """
        items = self.items
        for line in ordered:
            existing = self._find(line.key, items)
            if existing is None:
                continue
            existing.quantity -= line.quantity
        self._commit([item for item in items if item.quantity > 0])

    def clear(self) -> None:
        """Clear all items from the cart"""
        self._commit([])
