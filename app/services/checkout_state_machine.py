"""
Checkout state machine for managing checkout status transitions
"""

from typing import Dict, List, Set

from app.schemas.order import CheckoutState


class CheckoutStateMachine:
    """
    Manages valid checkout status transitions
    """

    def __init__(self):
        self.transitions: Dict[CheckoutState, Set[CheckoutState]] = {
            CheckoutState.IDLE: {
                CheckoutState.SUBMITTING
            },
            CheckoutState.SUBMITTING: {
                CheckoutState.SUCCESS,
                CheckoutState.ORDER_FAILED
            },
            CheckoutState.SUCCESS: {
                CheckoutState.PAYMENT_PENDING,
                CheckoutState.PAYMENT_FAILED,  # Intent could not be created
                CheckoutState.IDLE
            },
            CheckoutState.PAYMENT_PENDING: {
                CheckoutState.PAYMENT_COMPLETE,
                CheckoutState.PAYMENT_FAILED
            },
            CheckoutState.PAYMENT_COMPLETE: {
                CheckoutState.IDLE
            },
            CheckoutState.PAYMENT_FAILED: {
                CheckoutState.PAYMENT_PENDING,  # Payment retry
                CheckoutState.IDLE
            },
            CheckoutState.ORDER_FAILED: {
                CheckoutState.IDLE
            }
        }

    def can_transition(
        self,
        current_state: CheckoutState,
        new_state: CheckoutState
    ) -> bool:
        """
        Check if transition is valid

        Args:
            current_state: Current checkout state
            new_state: Desired new state

        Returns:
            True if transition is allowed
        """
        return new_state in self.transitions.get(current_state, set())

    def get_valid_transitions(self, current_state: CheckoutState) -> List[CheckoutState]:
        return list(self.transitions.get(current_state, set()))

    def is_busy(self, state: CheckoutState) -> bool:
        """A request is in flight or the customer is at the payment sheet"""
        return state in (CheckoutState.SUBMITTING, CheckoutState.PAYMENT_PENDING)
