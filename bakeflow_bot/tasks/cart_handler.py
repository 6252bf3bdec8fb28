"""
Cart Handler for the Ordering State Machine.

This module handles the browse-and-add part of the flow: showing the
product list, picking a product, picking a quantity and the add-more /
checkout decision.
"""

import logging

from ..errors import UserInputError
from .actions import Action
from .models import PendingItem, UserState
from .parsers import DEFAULT_EMOJI
from .schemas import ConversationState, OutboundMessage, StateMachineResult

logger = logging.getLogger(__name__)


class CartHandler:
    """
    Handles product browsing and cart building.

    Products come from the catalog; entering the product list is gated by
    business hours.
    """

    def __init__(self, catalog, message_builder, business_hours, product_limit: int = 10):
        """
        Initialize the cart handler.

        Args:
            catalog: ProductCatalog for product lookups.
            message_builder: MessageBuilder for prompts.
            business_hours: BusinessHours gate.
            product_limit: Maximum products shown in the carousel.
        """
        self.catalog = catalog
        self.message_builder = message_builder
        self.business_hours = business_hours
        self.product_limit = product_limit

    def product_names(self) -> list[str]:
        return [p.name for p in self.catalog.list_products(self.product_limit)]

    def product_carousel(self) -> OutboundMessage:
        return self.message_builder.product_list(self.catalog.list_products(self.product_limit))

    def show_products(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        """Enter awaiting_product with the product carousel, if the bakery is open."""
        if not self.business_hours.is_open_now():
            return StateMachineResult([self.message_builder.closed(state.lang)])

        products = self.catalog.list_products(self.product_limit)
        if not products:
            logger.warning("Catalog has no active products")
            return StateMachineResult([self.message_builder.say("menu_empty", state.lang)])

        state.pending_item = None
        # Carts built from here go back to the cart decision screen
        state.quick_order = False
        state.state = ConversationState.AWAITING_PRODUCT
        return StateMachineResult([self.message_builder.product_list(products)])

    def show_menu(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        """Text menu followed by the product carousel."""
        if not self.business_hours.is_open_now():
            return StateMachineResult([self.message_builder.closed(state.lang)])
        products = self.catalog.list_products(self.product_limit)
        result = StateMachineResult([self.message_builder.text_menu(products)])
        return result.extend(self.show_products(state))

    def select_product(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        """Pick a product by catalog key (named button or typed name)."""
        key = str(action.arg)
        product = self.catalog.product_by_key(key)
        if product is None:
            # Priced at the default later on
            logger.warning("Product %r not in catalog", key)
            name, emoji = key, DEFAULT_EMOJI
        else:
            name, emoji = product.name, product.emoji
        return self._start_pending_item(state, name, emoji)

    def order_product(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        """Pick a product by catalog id (ORDER_PRODUCT_<id>)."""
        if not self.business_hours.is_open_now():
            return StateMachineResult([self.message_builder.closed(state.lang)])

        product = self.catalog.product_by_id(int(action.arg))
        if product is None:
            return StateMachineResult([self.message_builder.say("product_not_found", state.lang)])
        return self._start_pending_item(state, product.name, product.emoji)

    def _start_pending_item(self, state: UserState, name: str, emoji: str) -> StateMachineResult:
        state.pending_item = PendingItem(product=name, emoji=emoji)
        state.state = ConversationState.AWAITING_QUANTITY
        return StateMachineResult([self.message_builder.ask_quantity(state)])

    def select_quantity(self, state: UserState, action: Action, user_id: str | None = None) -> StateMachineResult:
        """Fold the pending item into the cart with the chosen quantity."""
        if state.pending_item is None:
            raise UserInputError("Quantity chosen with no product pending")

        state.pending_item.quantity = int(action.arg)
        item = state.fold_pending_item()
        state.state = ConversationState.AWAITING_CART_DECISION
        logger.debug("Added %s to cart (%d items)", item.get_summary(), state.total_quantity())
        return StateMachineResult([self.message_builder.item_added(state, item)])

    def add_more(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        return self.show_products(state)

    def checkout(self, state: UserState, action: Action | None = None, user_id: str | None = None) -> StateMachineResult:
        """Show the cart and ask for the customer's name."""
        if not state.cart:
            state.state = ConversationState.MAIN_MENU
            messages = [self.message_builder.say("cart_empty", state.lang)]
            messages.extend(self.message_builder.main_menu(state.lang))
            return StateMachineResult(messages)

        state.state = ConversationState.AWAITING_NAME
        return StateMachineResult([
            OutboundMessage.plain(self.message_builder.cart(state)),
            self.message_builder.ask_name(state),
        ])
