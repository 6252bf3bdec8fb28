"""
Checkout Handler for the Ordering State Machine.

This module handles the checkout tail shared by the full and quick flows:
customer name, pickup or delivery, delivery address, the order summary and
the final confirmation that submits the order.
"""

import logging
from typing import Callable

from ..config import PICKUP_ADDRESS_LABEL
from ..errors import EmptyCartError, PersistenceError, UserInputError
from .actions import Action
from .models import UserState
from .schemas import ConversationState, StateMachineResult

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100
MAX_ADDRESS_LENGTH = 500


class CheckoutHandler:
    """
    Handles the checkout flow for orders.

    Collects the customer name, delivery method and address, then submits
    the order through the submit_order callback.
    """

    def __init__(
        self,
        message_builder=None,
        submit_order: Callable[[UserState, str], int] | None = None,
    ):
        """
        Initialize the checkout handler.

        Args:
            message_builder: MessageBuilder instance for generating messages.
            submit_order: Persists the order. Signature: (state, sender_id) -> order_id.
                          Raises EmptyCartError or PersistenceError.
        """
        self.message_builder = message_builder
        self._submit_order = submit_order

    def handle_name(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        name = " ".join(str(action.arg or "").split())
        if not name or len(name) > MAX_NAME_LENGTH:
            raise UserInputError("Name must be 1-100 characters")

        state.customer_name = name
        state.state = ConversationState.AWAITING_DELIVERY_TYPE
        return StateMachineResult([self.message_builder.ask_delivery_type(state)])

    def choose_pickup(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        state.delivery_type = "pickup"
        state.address = PICKUP_ADDRESS_LABEL
        state.state = ConversationState.CONFIRMING
        return self.show_summary(state)

    def choose_delivery(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        state.delivery_type = "delivery"
        state.address = None
        state.state = ConversationState.AWAITING_ADDRESS
        return StateMachineResult([self.message_builder.ask_address(state)])

    def handle_address(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        """Accept any non-empty text as the delivery address."""
        address = str(action.arg or "").strip()
        if not address or len(address) > MAX_ADDRESS_LENGTH:
            raise UserInputError("Address must be non-empty")

        state.address = address
        state.state = ConversationState.CONFIRMING
        return self.show_summary(state)

    def show_summary(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        return StateMachineResult([self.message_builder.order_summary(state)])

    def confirm(self, state: UserState, action: Action | None, user_id: str) -> StateMachineResult:
        """
        Submit the order.

        On success the caller discards the user's state. On a persistence
        failure the state (and cart) stay as they are so the user can retry.
        """
        try:
            order_id = self._submit_order(state, user_id)
        except EmptyCartError:
            logger.warning("Confirm with empty cart from %s", user_id)
            state.state = ConversationState.MAIN_MENU
            messages = [self.message_builder.say("cart_empty", state.lang)]
            messages.extend(self.message_builder.main_menu(state.lang))
            return StateMachineResult(messages)
        except PersistenceError as e:
            logger.error("Order submission failed for %s: %s", user_id, e)
            return StateMachineResult([self.message_builder.order_failed(state.lang)])

        return StateMachineResult(
            [self.message_builder.order_confirmed(state, order_id)],
            discard_state=True,
            order_id=order_id,
        )
