"""
Quick Order Handler for the Ordering State Machine.

This module handles the abbreviated quick-order path: a fixed set of best
sellers, each added one unit at a time without the quantity question. The
cart then joins the normal checkout at the name step.
"""

import logging

from .actions import Action
from .models import UserState
from .parsers import QUICK_ORDER_PRODUCTS
from .schemas import ConversationState, StateMachineResult

logger = logging.getLogger(__name__)


class QuickOrderHandler:
    """
    Handles quick-order cart building.

    Adding a product already in the cart increments that line instead of
    adding a second one.
    """

    def __init__(self, message_builder=None):
        self.message_builder = message_builder

    def open_form(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        state.state = ConversationState.QUICK_ORDERING
        state.quick_order = True
        state.pending_item = None
        return StateMachineResult([self.message_builder.quick_order_form()])

    def add_product(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        """Add one unit of a quick-order product (QUICK_ADD_<key> / QUICK_VIEW_<key>)."""
        entry = QUICK_ORDER_PRODUCTS.get(str(action.arg))
        if entry is None:
            logger.warning("Unknown quick-order key %r", action.arg)
            return StateMachineResult([self.message_builder.say("product_not_found", state.lang)])

        product, emoji = entry
        state.quick_order = True
        state.add_to_cart(product, emoji, 1)
        return StateMachineResult([
            self.message_builder.say("quick_added", state.lang, emoji=emoji, product=product),
            self.message_builder.quick_cart_summary(state),
        ])

    def show_cart(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        return StateMachineResult([self.message_builder.quick_cart_summary(state)])

    def checkout(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        if not state.cart:
            return StateMachineResult([
                self.message_builder.say("quick_checkout_empty", state.lang),
                self.message_builder.quick_order_form(),
            ])

        state.state = ConversationState.AWAITING_NAME
        return StateMachineResult([self.message_builder.ask_name(state)])

    def clear_cart(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        state.clear_cart()
        return StateMachineResult(self.message_builder.quick_cleared(state.lang))
