"""
Checkout submission: order creation and the payment handshake
"""

from typing import List, Optional
import logging

from starlette.concurrency import run_in_threadpool

from app.core.exceptions import (
    CheckoutInProgressError,
    CheckoutStateError,
    EmptyCartError,
    PaymentError,
    StorageError,
    StorefrontException
)
from app.schemas.cart import CartLineItem, OrderTotals
from app.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    CheckoutState,
    OrderConfirmation,
    OrderItemPayload,
    OrderPayload
)
from app.schemas.payment import PaymentIntent, PaymentVerificationRequest
from app.services.cart_store import CartStore
from app.services.checkout_state_machine import CheckoutStateMachine
from app.services.discount_service import DiscountComposer
from app.services.payment_gateway import RazorpayGateway
from app.services.pricing import calculate_totals
from app.services.storefront_client import StorefrontAPIClient

logger = logging.getLogger(__name__)


def build_order_payload(
    request: CheckoutRequest,
    items: List[CartLineItem],
    totals: OrderTotals,
    discounts: DiscountComposer
) -> OrderPayload:
    """Package the cart, addresses and computed totals for the order service"""
    promo = discounts.promo_code
    points = discounts.points_redemption
    return OrderPayload(
        items=[
            OrderItemPayload(
                product=item.product_id,
                quantity=item.quantity,
                price=item.unit_price,
                pack_size=item.pack_size
            )
            for item in items
        ],
        shipping_address=request.shipping_address,
        billing_address=request.effective_billing_address,
        payment={"method": request.payment_method.value},
        subtotal=totals.subtotal,
        shipping_cost=totals.shipping_cost,
        tax=totals.tax,
        discount=totals.discount,
        total=totals.total,
        promo_code=promo.code if promo else None,
        evolv_points_to_redeem=points.points_to_redeem if points else None,
        notes=request.notes
    )


class CheckoutSession:
    """
    Checkout progress for one session

    Idle -> Submitting -> Success -> (PaymentPending -> PaymentComplete |
    PaymentFailed), or Submitting -> OrderFailed. Terminal and failed
    states go back to Idle on the next submission.
    """

    def __init__(self, state_machine: Optional[CheckoutStateMachine] = None):
        self.state_machine = state_machine or CheckoutStateMachine()
        self.state = CheckoutState.IDLE
        self.order: Optional[OrderConfirmation] = None
        self.payment_intent: Optional[PaymentIntent] = None
        self.error: Optional[str] = None

    def _reject(self, new_state: CheckoutState) -> CheckoutStateError:
        allowed = [s.value for s in self.state_machine.get_valid_transitions(self.state)]
        logger.warning(f"Rejected checkout {self.state.value} -> {new_state.value}")
        return CheckoutStateError(self.state.value, new_state.value, allowed)

    def _transition(self, new_state: CheckoutState) -> None:
        if not self.state_machine.can_transition(self.state, new_state):
            raise self._reject(new_state)
        logger.info(f"Checkout {self.state.value} -> {new_state.value}")
        self.state = new_state

    def snapshot(self) -> CheckoutResponse:
        return CheckoutResponse(
            state=self.state,
            order=self.order,
            payment_intent=self.payment_intent,
            error=self.error
        )

    def reset(self) -> None:
        """Return to Idle, forgetting the previous attempt"""
        if self.state_machine.is_busy(self.state):
            raise CheckoutInProgressError()
        if self.state != CheckoutState.IDLE:
            self._transition(CheckoutState.IDLE)
        self.order = None
        self.payment_intent = None
        self.error = None

    async def submit(
        self,
        request: CheckoutRequest,
        cart: CartStore,
        discounts: DiscountComposer,
        client: StorefrontAPIClient,
        gateway: Optional[RazorpayGateway]
    ) -> CheckoutResponse:
        """
        Place the order and, for online methods, open the payment step

        The ordered lines and the discount leave the cart once the order
        exists.
        """
        if self.state_machine.is_busy(self.state):
            raise CheckoutInProgressError()

        items = cart.items
        if not items:
            raise EmptyCartError()
        if request.payment_method.is_online and gateway is None:
            raise PaymentError(
                "Online payments are not available right now",
                error_code="PAYMENT_UNAVAILABLE"
            )

        self.reset()
        totals = calculate_totals(items, discounts.discount_amount, include_tax=True)
        payload = build_order_payload(request, items, totals, discounts)

        self._transition(CheckoutState.SUBMITTING)
        try:
            order = await client.create_order(payload.to_wire())
        except Exception as e:
            self.error = e.detail if isinstance(e, StorefrontException) else "Order failed"
            self._transition(CheckoutState.ORDER_FAILED)
            logger.error(f"Order submission failed: {self.error}")
            raise

        self.order = order
        self._transition(CheckoutState.SUCCESS)
        logger.info(f"Order {order.order_id} placed for {order.total}")

        discounts.clear()
        try:
            cart.remove_ordered(items)
        except StorageError as e:
            logger.error(f"Order {order.order_id} placed but its lines could not be removed from the cart: {str(e)}")

        if request.payment_method.is_online:
            await self._start_payment(client, gateway)

        return self.snapshot()

    async def _start_payment(
        self,
        client: StorefrontAPIClient,
        gateway: Optional[RazorpayGateway]
    ) -> None:
        if gateway is None:
            error = PaymentError(
                "Online payments are not available right now",
                error_code="PAYMENT_UNAVAILABLE"
            )
            await self._payment_failed(client, error.detail)
            raise error

        try:
            intent = await run_in_threadpool(
                gateway.create_payment_intent,
                self.order.order_id,
                self.order.total,
                self.order.order_number
            )
        except PaymentError as e:
            await self._payment_failed(client, e.detail)
            raise

        self.payment_intent = intent
        self.error = None
        self._transition(CheckoutState.PAYMENT_PENDING)

    async def _payment_failed(self, client: StorefrontAPIClient, reason: str) -> None:
        self.error = reason
        if self.state != CheckoutState.PAYMENT_FAILED:
            self._transition(CheckoutState.PAYMENT_FAILED)
        try:
            await client.report_payment_failure(self.order.order_id, reason)
        except StorefrontException as e:
            logger.error(f"Could not record payment failure for order {self.order.order_id}: {e.detail}")

    async def verify_payment(
        self,
        verification: PaymentVerificationRequest,
        client: StorefrontAPIClient,
        gateway: Optional[RazorpayGateway]
    ) -> CheckoutResponse:
        """Check the gateway signature and confirm the capture with the order service"""
        if self.state != CheckoutState.PAYMENT_PENDING:
            raise self._reject(CheckoutState.PAYMENT_COMPLETE)
        if gateway is None:
            raise PaymentError(
                "Online payments are not available right now",
                error_code="PAYMENT_UNAVAILABLE"
            )

        valid = (
            verification.razorpay_order_id == self.payment_intent.gateway_order_id
            and gateway.verify_payment_signature(
                verification.razorpay_order_id,
                verification.razorpay_payment_id,
                verification.razorpay_signature
            )
        )
        if not valid:
            error = PaymentError("Payment verification failed", error_code="INVALID_SIGNATURE")
            await self._payment_failed(client, error.detail)
            raise error

        await client.confirm_payment(
            self.order.order_id,
            verification.razorpay_order_id,
            verification.razorpay_payment_id,
            verification.razorpay_signature
        )
        self.error = None
        self._transition(CheckoutState.PAYMENT_COMPLETE)
        logger.info(f"Payment {verification.razorpay_payment_id} captured for order {self.order.order_id}")
        return self.snapshot()

    async def fail_payment(self, reason: str, client: StorefrontAPIClient) -> CheckoutResponse:
        """Payment sheet dismissed or the gateway reported an error"""
        if self.state != CheckoutState.PAYMENT_PENDING:
            raise self._reject(CheckoutState.PAYMENT_FAILED)
        await self._payment_failed(client, reason)
        return self.snapshot()

    async def retry_payment(
        self,
        client: StorefrontAPIClient,
        gateway: Optional[RazorpayGateway]
    ) -> CheckoutResponse:
        """Open a fresh payment intent for the unpaid order"""
        if self.state != CheckoutState.PAYMENT_FAILED or self.order is None:
            raise self._reject(CheckoutState.PAYMENT_PENDING)
        await self._start_payment(client, gateway)
        return self.snapshot()
