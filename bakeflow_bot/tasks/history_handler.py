"""
History Handler for the Ordering State Machine.

This module handles everything that looks at past orders from the chat:
listing recent orders, reordering a previous order and rating a delivered
one.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from ..services.order import get_order_for_sender, recent_orders_for_sender, save_rating
from .actions import Action
from .models import CartItem, UserState
from .parsers import DEFAULT_EMOJI
from .schemas import ConversationState, OutboundMessage, StateMachineResult

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5


class HistoryHandler:
    """
    Handles order history, reorder and rating.

    Each operation opens its own short database session.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        catalog=None,
        message_builder=None,
        business_hours=None,
    ):
        self._session_factory = session_factory
        self.catalog = catalog
        self.message_builder = message_builder
        self.business_hours = business_hours

    def show_history(self, state: UserState, action: Action | None, user_id: str) -> StateMachineResult:
        db = self._session_factory()
        try:
            orders = recent_orders_for_sender(db, user_id, limit=HISTORY_LIMIT)
            if not orders:
                return StateMachineResult([self.message_builder.say("no_orders", state.lang)])
            return StateMachineResult([self.message_builder.order_history(orders)])
        finally:
            db.close()

    def reorder(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        """Copy a previous order's items into a fresh cart and go to the name step."""
        if self.business_hours is not None and not self.business_hours.is_open_now():
            return StateMachineResult([self.message_builder.closed(state.lang)])

        order_id = int(action.arg)
        db = self._session_factory()
        try:
            order = get_order_for_sender(db, order_id, user_id)
            if order is None:
                return StateMachineResult([self.message_builder.say("order_not_found", state.lang)])
            items = [(item.product, item.quantity) for item in order.items]
        finally:
            db.close()

        state.reset(keep_language=True)
        for product, quantity in items:
            state.cart.append(CartItem(product=product, emoji=self._emoji_for(product), quantity=quantity))
        state.reordered_from = order_id
        state.state = ConversationState.AWAITING_NAME
        logger.info("User %s reordering order #%s", user_id, order_id)

        return StateMachineResult([
            self.message_builder.say("reorder_intro", state.lang, order_id=order_id),
            OutboundMessage.plain(self.message_builder.cart(state)),
            self.message_builder.ask_name(state),
        ])

    def _emoji_for(self, product: str) -> str:
        if self.catalog is None:
            return DEFAULT_EMOJI
        found = self.catalog.product_by_key(product)
        return found.emoji if found else DEFAULT_EMOJI

    def ask_for_rating(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        """RATE_ORDER_<id>: ask for stars on a delivered, unrated order."""
        order_id = int(action.arg)
        db = self._session_factory()
        try:
            order = get_order_for_sender(db, order_id, user_id)
            if order is None:
                return StateMachineResult([self.message_builder.say("order_not_found", state.lang)])
            if order.status != "delivered":
                return StateMachineResult([self.message_builder.say("rating_not_delivered", state.lang, order_id=order_id)])
            if order.rating_id is not None:
                return StateMachineResult([self.message_builder.say("already_rated", state.lang, order_id=order_id)])
        finally:
            db.close()

        state.pending_item = None
        state.rating_order_id = order_id
        state.state = ConversationState.AWAITING_RATING
        return StateMachineResult([self.message_builder.ask_rating(state.lang, order_id)])

    def rate(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        """RATING_<n>: store the rating and return to the main menu."""
        order_id = state.rating_order_id
        stars = int(action.arg)

        db = self._session_factory()
        try:
            order = get_order_for_sender(db, order_id, user_id) if order_id is not None else None
            if order is None:
                message = self.message_builder.say("order_not_found", state.lang)
            elif save_rating(db, order, user_id, stars) is None:
                message = self.message_builder.say("already_rated", state.lang, order_id=order_id)
            else:
                message = self.message_builder.say("rating_thanks", state.lang, stars=stars)
        finally:
            db.close()

        self._back_to_main_menu(state)
        return StateMachineResult([message])

    def skip_rating(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        if state.state == ConversationState.AWAITING_RATING:
            self._back_to_main_menu(state)
        return StateMachineResult([self.message_builder.say("rating_skipped", state.lang)])

    @staticmethod
    def _back_to_main_menu(state: UserState) -> None:
        state.reset(keep_language=True)
        state.state = ConversationState.MAIN_MENU
