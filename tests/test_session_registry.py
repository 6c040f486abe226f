"""Tests for per-session state."""

from decimal import Decimal

from conftest import line_item
from app.schemas.order import CheckoutState
from app.services.session_registry import SessionRegistry


def test_same_id_returns_same_session(storage):
    registry = SessionRegistry(storage)
    assert registry.get("abc") is registry.get("abc")
    assert len(registry) == 1


def test_least_recently_used_session_is_evicted(storage):
    registry = SessionRegistry(storage, max_sessions=2)
    first = registry.get("one")
    first.cart.add_item(line_item())
    first.discounts.available_points = 10
    registry.get("two")
    registry.get("three")

    assert len(registry) == 2
    restored = registry.get("one")
    assert restored is not first
    # cart survives on disk, in-memory state does not
    assert len(restored.cart.items) == 1
    assert restored.discounts.available_points is None


def test_recent_use_protects_session(storage):
    registry = SessionRegistry(storage, max_sessions=2)
    first = registry.get("one")
    registry.get("two")
    registry.get("one")
    registry.get("three")

    assert registry.get("one") is first


def test_cart_view_excludes_tax(storage):
    session = SessionRegistry(storage).get("abc")
    session.cart.add_item(line_item())

    view = session.cart_view()
    assert view.totals.tax == Decimal("0")
    assert session.totals(include_tax=True).tax == Decimal("63.92")


def test_session_mid_checkout_is_not_evicted(storage):
    registry = SessionRegistry(storage, max_sessions=2)
    paying = registry.get("one")
    paying.checkout.state = CheckoutState.PAYMENT_PENDING
    registry.get("two")
    registry.get("three")

    assert len(registry) == 2
    assert registry.get("one") is paying
    assert paying.checkout.state == CheckoutState.PAYMENT_PENDING


def test_all_sessions_mid_checkout(storage):
    registry = SessionRegistry(storage, max_sessions=1)
    submitting = registry.get("one")
    submitting.checkout.state = CheckoutState.SUBMITTING
    registry.get("two").checkout.state = CheckoutState.SUBMITTING

    assert len(registry) == 2
    assert registry.get("one") is submitting
