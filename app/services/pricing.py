"""
Order total calculation shared by the cart drawer and checkout

Both surfaces call ``calculate_totals``; the drawer passes
``include_tax=False`` and checkout passes ``include_tax=True``.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.core.config import settings
from app.schemas.cart import CartLineItem, OrderTotals

ZERO = Decimal("0")
CENT = Decimal("0.01")


def quantize_money(amount: Decimal) -> Decimal:
    """Round to paise"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_subtotal(items: Iterable[CartLineItem]) -> Decimal:
    return sum((item.line_total for item in items), ZERO)


def calculate_shipping(
    subtotal: Decimal,
    threshold: Decimal,
    flat_fee: Decimal
) -> Decimal:
    """Free at or above the threshold; nothing to ship means no fee"""
    if subtotal <= ZERO or subtotal >= threshold:
        return ZERO
    return flat_fee


def calculate_totals(
    items: Iterable[CartLineItem],
    discount_amount: Decimal = ZERO,
    *,
    include_tax: bool,
    shipping_threshold: Optional[Decimal] = None,
    shipping_flat_fee: Optional[Decimal] = None,
    tax_rate: Optional[Decimal] = None
) -> OrderTotals:
    """
    Derive subtotal, shipping, tax, discount and total

    Args:
        items: Cart line items
        discount_amount: Amount of the active discount (0 when none)
        include_tax: Whether tax is charged on this surface
        shipping_threshold: Subtotal at which shipping becomes free
        shipping_flat_fee: Fee below the threshold
        tax_rate: Fraction of subtotal charged as tax

    Returns:
        OrderTotals with the total floored at zero
    """
    items = list(items)
    if shipping_threshold is None:
        shipping_threshold = settings.FREE_SHIPPING_THRESHOLD
    if shipping_flat_fee is None:
        shipping_flat_fee = settings.SHIPPING_FLAT_FEE
    if tax_rate is None:
        tax_rate = settings.TAX_RATE

    subtotal = calculate_subtotal(items)
    shipping_cost = calculate_shipping(subtotal, shipping_threshold, shipping_flat_fee)
    tax = subtotal * tax_rate if include_tax else ZERO
    discount = max(ZERO, Decimal(discount_amount))
    total = max(ZERO, subtotal + shipping_cost + tax - discount)

    return OrderTotals(
        subtotal=quantize_money(subtotal),
        shipping_cost=quantize_money(shipping_cost),
        tax=quantize_money(tax),
        discount=quantize_money(discount),
        total=quantize_money(total),
        item_count=sum(item.quantity for item in items),
        amount_to_free_shipping=quantize_money(max(ZERO, shipping_threshold - subtotal))
    )
