"""
Discount composition for a cart: one promo code or one points redemption
"""

from typing import Any, Dict, List, Optional, Protocol
from decimal import Decimal
import logging

from app.core.config import settings
from app.core.exceptions import (
    InsufficientPointsError,
    InvalidAmountError,
    InvalidCodeError
)
from app.schemas.discount import ActiveDiscount, PointsDiscount, PromoDiscount
from app.schemas.loyalty import LoyaltyBalance

logger = logging.getLogger(__name__)

PROMO_CODE_MIN_LENGTH = 3
PROMO_CODE_MAX_LENGTH = 20


class PromoValidator(Protocol):
    async def validate_promo(
        self,
        code: str,
        order_value: Decimal,
        items: List[Dict[str, Any]]
    ) -> PromoDiscount: ...


class LoyaltyBalanceSource(Protocol):
    async def get_loyalty_balance(self) -> LoyaltyBalance: ...


def normalize_promo_code(code: str) -> str:
    """Trim and upper-case; reject lengths the promo service never issues"""
    normalized = (code or "").strip().upper()
    if not (PROMO_CODE_MIN_LENGTH <= len(normalized) <= PROMO_CODE_MAX_LENGTH):
        raise InvalidCodeError(
            f"Promo code must be {PROMO_CODE_MIN_LENGTH}-{PROMO_CODE_MAX_LENGTH} characters"
        )
    return normalized


class DiscountComposer:
    """
    Holds the single active discount for a cart

    Applying a promo code replaces a points redemption and vice versa.
    Every change bumps ``generation``; a validation that resolves after a
    newer change is dropped rather than applied.
    """

    def __init__(self, point_value: Optional[Decimal] = None):
        self.point_value = point_value if point_value is not None else settings.POINT_VALUE
        self.active_discount: Optional[ActiveDiscount] = None
        self.generation = 0
        self.available_points: Optional[int] = None

    def _bump(self) -> int:
        self.generation += 1
        return self.generation

    def _is_current(self, generation: int, what: str) -> bool:
        if generation != self.generation:
            logger.warning(f"Discarding stale {what} result (generation {generation}, now {self.generation})")
            return False
        return True

    @property
    def promo_code(self) -> Optional[PromoDiscount]:
        if isinstance(self.active_discount, PromoDiscount):
            return self.active_discount
        return None

    @property
    def points_redemption(self) -> Optional[PointsDiscount]:
        if isinstance(self.active_discount, PointsDiscount):
            return self.active_discount
        return None

    @property
    def discount_amount(self) -> Decimal:
        if self.active_discount is None:
            return Decimal("0")
        return self.active_discount.discount_amount

    async def apply_promo_code(
        self,
        code: str,
        validator: PromoValidator,
        order_value: Decimal,
        items: List[Dict[str, Any]]
    ) -> Optional[PromoDiscount]:
        """
        Validate a promo code and make it the active discount

        Args:
            code: Code as typed by the customer
            validator: Promo validation service
            order_value: Current cart subtotal
            items: Cart lines in the promo service's format

        Returns:
            The applied promo, or None if a newer change superseded it
        """
        normalized = normalize_promo_code(code)
        generation = self._bump()

        promo = await validator.validate_promo(normalized, order_value, items)

        if not self._is_current(generation, "promo validation"):
            return None

        if self.points_redemption is not None:
            logger.info("Promo code replaces Evolv points redemption")
        self.active_discount = promo
        logger.info(f"Applied promo code {promo.code} for {promo.discount_amount}")
        return promo

    async def apply_points_redemption(
        self,
        points: int,
        balance_source: LoyaltyBalanceSource
    ) -> Optional[PointsDiscount]:
        """
        Redeem Evolv points at 1 point = 1 rupee

        Raises:
            InvalidAmountError: points is not positive
            InsufficientPointsError: more points than the customer holds
        """
        if points <= 0:
            raise InvalidAmountError()

        generation = self._bump()
        balance = await balance_source.get_loyalty_balance()

        if not self._is_current(generation, "points balance"):
            return None

        self.available_points = balance.points
        if points > balance.points:
            raise InsufficientPointsError(available=balance.points, requested=points)

        if self.promo_code is not None:
            logger.info("Evolv points redemption replaces promo code")
        redemption = PointsDiscount(
            points_to_redeem=points,
            discount_amount=Decimal(points) * self.point_value
        )
        self.active_discount = redemption
        return redemption

    def remove_promo_code(self) -> None:
        self._bump()
        if self.promo_code is not None:
            self.active_discount = None

    def remove_points_redemption(self) -> None:
        self._bump()
        if self.points_redemption is not None:
            self.active_discount = None

    def clear(self) -> None:
        self._bump()
        self.active_discount = None
