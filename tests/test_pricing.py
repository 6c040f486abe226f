"""Tests for the order total calculator."""

from decimal import Decimal

from conftest import line_item
from app.services.pricing import calculate_shipping, calculate_totals


class TestShipping:
    """Free-shipping threshold"""

    def test_below_threshold_pays_flat_fee(self):
        totals = calculate_totals([line_item(unit_price="999")], include_tax=False)
        assert totals.shipping_cost == Decimal("50")

    def test_exactly_at_threshold_ships_free(self):
        totals = calculate_totals([line_item(unit_price="1000")], include_tax=False)
        assert totals.shipping_cost == Decimal("0")

    def test_above_threshold_ships_free(self):
        totals = calculate_totals([line_item(unit_price="600", quantity=2)], include_tax=False)
        assert totals.shipping_cost == Decimal("0")

    def test_empty_cart_has_no_shipping(self):
        assert calculate_shipping(Decimal("0"), Decimal("1000"), Decimal("50")) == Decimal("0")
        totals = calculate_totals([], include_tax=True)
        assert totals.total == Decimal("0")

    def test_amount_to_free_shipping(self):
        totals = calculate_totals([line_item(unit_price="799")], include_tax=False)
        assert totals.amount_to_free_shipping == Decimal("201")


class TestTotals:
    """Subtotal, tax, discount and total"""

    def test_subtotal_multiplies_price_by_quantity(self):
        items = [
            line_item("A", 6, 2, "799"),
            line_item("B", 12, 1, "1499.50"),
        ]
        totals = calculate_totals(items, include_tax=False)
        assert totals.subtotal == Decimal("3097.50")
        assert totals.item_count == 3

    def test_cart_drawer_total_excludes_tax(self):
        totals = calculate_totals([line_item()], Decimal("80"), include_tax=False)

        assert totals.subtotal == Decimal("799")
        assert totals.shipping_cost == Decimal("50")
        assert totals.tax == Decimal("0")
        assert totals.discount == Decimal("80")
        assert totals.total == Decimal("769")

    def test_checkout_total_includes_tax(self):
        totals = calculate_totals([line_item()], Decimal("80"), include_tax=True)

        assert totals.tax == Decimal("63.92")
        assert totals.total == Decimal("832.92")

    def test_total_never_negative(self):
        totals = calculate_totals(
            [line_item(unit_price="100")],
            Decimal("500"),
            include_tax=True,
            shipping_flat_fee=Decimal("0"),
            tax_rate=Decimal("0.08")
        )

        assert totals.subtotal == Decimal("100")
        assert totals.shipping_cost == Decimal("0")
        assert totals.tax == Decimal("8")
        assert totals.total == Decimal("0")

    def test_tax_rounds_half_up_to_paise(self):
        totals = calculate_totals([line_item(unit_price="10.05")], include_tax=True)
        # 10.05 * 0.08 = 0.804
        assert totals.tax == Decimal("0.80")
        totals = calculate_totals([line_item(unit_price="10.0625")], include_tax=True)
        # 10.0625 * 0.08 = 0.805
        assert totals.tax == Decimal("0.81")
