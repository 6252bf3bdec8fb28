"""
State Machine for the Chat Ordering Flow.

Each inbound event becomes an Action (see actions.py). Dispatch is an
explicit table keyed by (current state, action type), plus a set of actions
that are valid from any state (cancel, language, menu navigation, history).

Anything outside the table is rejected without touching the state:
- a quantity button outside awaiting_quantity gets "select a product first"
- any other known button from an earlier screen gets "complete your current
  step first"
- free text a step cannot use repeats that step's prompt
Unknown payloads reset the user with an apology so nobody gets stuck.
"""

import logging
from typing import Callable, Dict, Tuple

from ..errors import UserInputError
from .actions import Action, ActionType, interpret_text, parse_action
from .cart_handler import CartHandler
from .checkout_handler import CheckoutHandler
from .history_handler import HistoryHandler
from .message_builder import MessageBuilder
from .models import UserState
from .quick_order_handler import QuickOrderHandler
from .schemas import ConversationState, StateMachineResult

logger = logging.getLogger(__name__)

Handler = Callable[[UserState, Action, str], StateMachineResult]

S = ConversationState
A = ActionType


class OrderStateMachine:
    """
    Drives one user's conversation.

    process() mutates the given UserState in place and returns the messages
    to send. The caller owns locking, persistence of the state and delivery.
    """

    def __init__(
        self,
        catalog,
        message_builder: MessageBuilder,
        business_hours,
        submit_order: Callable[[UserState, str], int],
        session_factory,
    ):
        """
        Initialize the state machine and its handlers.

        Args:
            catalog: ProductCatalog for product lookups.
            message_builder: MessageBuilder for all prompts.
            business_hours: BusinessHours gate.
            submit_order: Persists a confirmed order, (state, sender_id) -> order_id.
            session_factory: SQLAlchemy session factory for history and ratings.
        """
        self.message_builder = message_builder

        self.cart_handler = CartHandler(catalog, message_builder, business_hours)
        self.checkout_handler = CheckoutHandler(message_builder=message_builder, submit_order=submit_order)
        self.quick_order_handler = QuickOrderHandler(message_builder=message_builder)
        self.history_handler = HistoryHandler(
            session_factory,
            catalog=catalog,
            message_builder=message_builder,
            business_hours=business_hours,
        )

        self._global_handlers: Dict[ActionType, Handler] = {
            A.CANCEL_ORDER: self._cancel,
            A.LANG_EN: self._select_language,
            A.LANG_MY: self._select_language,
            A.GET_STARTED: self._show_language_selection,
            A.MENU_CHANGE_LANG: self._show_language_selection,
            A.MENU_ORDER: self._show_main_menu,
            A.MAIN_MENU: self._reset_to_main_menu,
            A.MENU_ORDER_PRODUCTS: self.cart_handler.show_products,
            A.SHOW_MENU: self.cart_handler.show_menu,
            A.MENU_ABOUT: self._show_about,
            A.MENU_HELP: self._show_about,
            A.GO_BACK: self._go_back,
            A.QUICK_SHOP: self.quick_order_handler.open_form,
            A.QUICK_ADD_MORE: self.quick_order_handler.open_form,
            A.MENU_ORDER_HISTORY: self.history_handler.show_history,
            A.REORDER: self.history_handler.reorder,
            A.RATE_ORDER: self.history_handler.ask_for_rating,
            A.SKIP_RATING: self.history_handler.skip_rating,
        }

        self._transitions: Dict[Tuple[ConversationState, ActionType], Handler] = {
            (S.AWAITING_PRODUCT, A.SELECT_PRODUCT): self.cart_handler.select_product,
            (S.AWAITING_PRODUCT, A.ORDER_PRODUCT): self.cart_handler.order_product,
            (S.AWAITING_QUANTITY, A.QUANTITY): self.cart_handler.select_quantity,
            (S.AWAITING_CART_DECISION, A.ADD_MORE_ITEMS): self.cart_handler.add_more,
            (S.AWAITING_CART_DECISION, A.CHECKOUT): self.cart_handler.checkout,
            (S.AWAITING_NAME, A.TEXT): self.checkout_handler.handle_name,
            (S.AWAITING_DELIVERY_TYPE, A.PICKUP): self.checkout_handler.choose_pickup,
            (S.AWAITING_DELIVERY_TYPE, A.DELIVERY): self.checkout_handler.choose_delivery,
            (S.AWAITING_ADDRESS, A.TEXT): self.checkout_handler.handle_address,
            (S.CONFIRMING, A.CONFIRM_ORDER): self.checkout_handler.confirm,
            (S.QUICK_ORDERING, A.QUICK_ADD): self.quick_order_handler.add_product,
            (S.QUICK_ORDERING, A.QUICK_SHOW_CART): self.quick_order_handler.show_cart,
            (S.QUICK_ORDERING, A.QUICK_CHECKOUT): self.quick_order_handler.checkout,
            (S.QUICK_ORDERING, A.QUICK_CLEAR_CART): self.quick_order_handler.clear_cart,
            (S.AWAITING_RATING, A.RATING): self.history_handler.rate,
        }

    # =========================================================================
    # Entry points
    # =========================================================================

    def handle_payload(self, user_id: str, state: UserState, payload: str) -> StateMachineResult:
        """Process a button payload (postback or quick reply)."""
        return self.process(user_id, state, parse_action(payload))

    def handle_text(self, user_id: str, state: UserState, text: str) -> StateMachineResult:
        """Process free text typed by the user."""
        product_names = None
        if state.state == S.AWAITING_PRODUCT:
            product_names = self.cart_handler.product_names()
        action = interpret_text(
            state.state,
            text,
            product_names=product_names,
            has_language=state.language is not None,
        )
        return self.process(user_id, state, action)

    def process(self, user_id: str, state: UserState, action: Action | None) -> StateMachineResult:
        if action is None:
            logger.info("Unrecognized action from %s in %s, resetting", user_id, state.state.value)
            return StateMachineResult(
                [self.message_builder.say("not_understood", state.lang)],
                discard_state=True,
            )

        handler = self._global_handlers.get(action.type) or self._transitions.get((state.state, action.type))
        if handler is None:
            return self._reject(user_id, state, action)

        logger.debug("User %s: %s + %s", user_id, state.state.value, action.type.value)
        try:
            return handler(state, action, user_id)
        except UserInputError as e:
            logger.info("Input rejected for %s in %s: %s", user_id, state.state.value, e)
            return self.reprompt(state)

    def _reject(self, user_id: str, state: UserState, action: Action) -> StateMachineResult:
        if action.type == A.TEXT:
            return self.reprompt(state)

        logger.info("Stale action %s from %s in %s", action.type.value, user_id, state.state.value)
        if action.type == A.QUANTITY:
            return StateMachineResult([self.message_builder.say("select_product_first", state.lang)])
        return StateMachineResult([self.message_builder.say("stale_action", state.lang)])

    def reprompt(self, state: UserState) -> StateMachineResult:
        """Repeat the prompt of the user's current step without changing state."""
        mb = self.message_builder
        lang = state.lang
        current = state.state

        if current == S.LANGUAGE_SELECTION:
            return StateMachineResult(mb.language_selection())
        if current == S.AWAITING_PRODUCT:
            return StateMachineResult([mb.say("choose_product", lang), self.cart_handler.product_carousel()])
        if current == S.AWAITING_QUANTITY and state.pending_item is not None:
            return StateMachineResult([mb.ask_quantity(state)])
        if current == S.AWAITING_CART_DECISION and state.cart:
            return StateMachineResult([mb.cart_decision(state)])
        if current == S.AWAITING_NAME:
            return StateMachineResult([mb.ask_name(state)])
        if current == S.AWAITING_DELIVERY_TYPE:
            return StateMachineResult([mb.ask_delivery_type(state)])
        if current == S.AWAITING_ADDRESS:
            return StateMachineResult([mb.ask_address(state)])
        if current == S.CONFIRMING:
            return StateMachineResult([mb.order_summary(state)])
        if current == S.QUICK_ORDERING:
            return StateMachineResult([mb.quick_order_form()])
        if current == S.AWAITING_RATING and state.rating_order_id is not None:
            return StateMachineResult([mb.ask_rating(lang, state.rating_order_id)])
        return StateMachineResult(mb.main_menu(lang))

    # =========================================================================
    # Navigation handlers
    # =========================================================================

    def _cancel(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        logger.info("User %s cancelled from %s", user_id, state.state.value)
        return StateMachineResult(self.message_builder.cancelled(state.lang), discard_state=True)

    def _select_language(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        state.language = "my" if action.type == A.LANG_MY else "en"
        state.state = S.GREETING
        result = StateMachineResult([self.message_builder.say("language_selected", state.lang)])
        return result.extend(self._show_main_menu(state, action, user_id))

    def _show_language_selection(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        state.state = S.LANGUAGE_SELECTION
        return StateMachineResult(self.message_builder.language_selection())

    def _show_main_menu(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        state.pending_item = None
        state.state = S.MAIN_MENU
        return StateMachineResult(self.message_builder.main_menu(state.lang))

    def _reset_to_main_menu(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        state.reset(keep_language=True)
        return self._show_main_menu(state, action, user_id)

    def _show_about(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        return StateMachineResult([self.message_builder.about(state.lang)])

    def _go_back(self, state: UserState, action: Action, user_id: str) -> StateMachineResult:
        """Step back one screen in the checkout chain; elsewhere return to the main menu."""
        current = state.state

        if current == S.AWAITING_QUANTITY:
            state.pending_item = None
            state.state = S.AWAITING_PRODUCT
            return StateMachineResult([self.cart_handler.product_carousel()])

        if current == S.AWAITING_NAME:
            if state.quick_order:
                state.state = S.QUICK_ORDERING
                return StateMachineResult([self.message_builder.quick_cart_summary(state)])
            if state.cart:
                state.state = S.AWAITING_CART_DECISION
                return StateMachineResult([self.message_builder.cart_decision(state)])

        if current == S.AWAITING_DELIVERY_TYPE:
            state.state = S.AWAITING_NAME
            return StateMachineResult([self.message_builder.ask_name(state)])

        if current == S.AWAITING_ADDRESS:
            state.delivery_type = None
            state.state = S.AWAITING_DELIVERY_TYPE
            return StateMachineResult([self.message_builder.ask_delivery_type(state)])

        if current == S.CONFIRMING:
            state.state = S.AWAITING_DELIVERY_TYPE
            return StateMachineResult([self.message_builder.ask_delivery_type(state)])

        return self._show_main_menu(state, action, user_id)
