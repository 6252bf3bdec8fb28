"""
End-to-end conversation tests through ConversationService.

Each test drives one chat user with button payloads and free text, then
checks the in-memory state, the persisted orders and what was sent.

Run with: pytest tests/test_conversation_flow.py -v
"""

from bakeflow_bot.models import Order, OrderItem, Rating
from bakeflow_bot.tasks.schemas import ConversationState, MessageKind

USER = "user-1"


def _send(conversation, payload=None, text=None, user=USER):
    return conversation.handle_inbound_event(user, payload=payload, text=text)


def _start_english(conversation):
    _send(conversation, payload="GET_STARTED")
    _send(conversation, payload="LANG_EN")


def _cart_with_two_chocolate_cakes(conversation):
    _start_english(conversation)
    _send(conversation, payload="MENU_ORDER_PRODUCTS")
    _send(conversation, payload="ORDER_CHOCOLATE_CAKE")
    _send(conversation, payload="QTY_2")


# =============================================================================
# Full order
# =============================================================================

class TestFullOrder:
    """Product -> quantity -> checkout -> name -> delivery type -> confirm."""

    def test_chocolate_cake_pickup_for_ana(self, conversation, store, session_factory):
        _cart_with_two_chocolate_cakes(conversation)
        assert store.get(USER).state == ConversationState.AWAITING_CART_DECISION

        _send(conversation, payload="CHECKOUT")
        assert store.get(USER).state == ConversationState.AWAITING_NAME

        _send(conversation, text="Ana")
        state = store.get(USER)
        assert state.customer_name == "Ana"
        assert state.state == ConversationState.AWAITING_DELIVERY_TYPE

        _send(conversation, payload="PICKUP")
        assert store.get(USER).state == ConversationState.CONFIRMING

        result = _send(conversation, payload="CONFIRM_ORDER")
        assert result.order_id is not None
        assert USER not in store

        db = session_factory()
        try:
            order = db.get(Order, result.order_id)
            assert order.customer_name == "Ana"
            assert order.status == "pending"
            assert order.delivery_type == "pickup"
            assert order.address == "Pickup at store"
            assert order.total_items == 2
            assert order.subtotal == 50.0
            assert order.delivery_fee == 0.0
            assert order.total_amount == 50.0
            assert order.sender_id == USER

            items = db.query(OrderItem).filter(OrderItem.order_id == order.id).all()
            assert [(i.product, i.quantity, i.price) for i in items] == [("Chocolate Cake", 2, 25.0)]
        finally:
            db.close()

    def test_confirmation_message_sent(self, conversation, messenger):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        _send(conversation, text="Ana")
        _send(conversation, payload="PICKUP")
        messenger.clear()

        result = _send(conversation, payload="CONFIRM_ORDER")

        text = messenger.text_for(USER)
        assert "Order Confirmed" in text
        assert f"Order #{result.order_id}" in text
        assert "$50.00" in text

    def test_delivery_order_adds_fee(self, conversation, store, session_factory):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        _send(conversation, text="Ana")
        _send(conversation, text="delivery please")
        assert store.get(USER).state == ConversationState.AWAITING_ADDRESS

        _send(conversation, text="12 Pyay Road, Yangon")
        state = store.get(USER)
        assert state.address == "12 Pyay Road, Yangon"
        assert state.state == ConversationState.CONFIRMING

        result = _send(conversation, payload="CONFIRM_ORDER")

        db = session_factory()
        try:
            order = db.get(Order, result.order_id)
            assert order.delivery_type == "delivery"
            assert order.address == "12 Pyay Road, Yangon"
            assert order.delivery_fee > 0
            assert order.total_amount == round(order.subtotal + order.delivery_fee, 2)
        finally:
            db.close()

    def test_add_more_keeps_separate_lines(self, conversation, store):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="ADD_MORE_ITEMS")
        assert store.get(USER).state == ConversationState.AWAITING_PRODUCT

        _send(conversation, text="I want a croissant")
        assert store.get(USER).state == ConversationState.AWAITING_QUANTITY

        _send(conversation, text="three")
        cart = store.get(USER).cart
        assert [(i.product, i.quantity) for i in cart] == [("Chocolate Cake", 2), ("Croissant", 3)]
        assert store.get(USER).total_quantity() == 5

    def test_order_product_by_catalog_id(self, conversation, store, session_factory):
        from bakeflow_bot.models import Product

        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")

        db = session_factory()
        try:
            croissant_id = db.query(Product).filter(Product.key == "Croissant").one().id
        finally:
            db.close()

        _send(conversation, payload=f"ORDER_PRODUCT_{croissant_id}")
        pending = store.get(USER).pending_item
        assert pending.product == "Croissant"
        assert pending.emoji == "🥐"

    def test_unknown_product_id(self, conversation, store, messenger):
        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        messenger.clear()

        _send(conversation, payload="ORDER_PRODUCT_9999")

        assert store.get(USER).state == ConversationState.AWAITING_PRODUCT
        assert "Product not found" in messenger.text_for(USER)


# =============================================================================
# Cancel, reset and stale buttons
# =============================================================================

class TestCancelAndReset:

    def test_cancel_from_awaiting_address(self, conversation, store, session_factory, messenger):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        _send(conversation, text="Ana")
        _send(conversation, payload="DELIVERY")
        assert store.get(USER).state == ConversationState.AWAITING_ADDRESS
        messenger.clear()

        _send(conversation, text="cancel")

        assert USER not in store
        assert "Order cancelled" in messenger.text_for(USER)
        db = session_factory()
        try:
            assert db.query(Order).count() == 0
        finally:
            db.close()

    def test_next_event_after_cancel_starts_at_language_selection(self, conversation, store):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CANCEL_ORDER")

        _send(conversation, text="something random")

        state = store.get(USER)
        assert state.state == ConversationState.LANGUAGE_SELECTION
        assert state.cart == []

    def test_unknown_payload_resets(self, conversation, store, messenger):
        _cart_with_two_chocolate_cakes(conversation)
        messenger.clear()

        _send(conversation, payload="SOMETHING_WE_NEVER_SENT")

        assert USER not in store
        assert "didn't understand" in messenger.text_for(USER)

    def test_quantity_button_outside_awaiting_quantity(self, conversation, store, messenger):
        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        messenger.clear()

        _send(conversation, payload="QTY_3")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_PRODUCT
        assert state.cart == []
        assert "select a product first" in messenger.text_for(USER)

    def test_stale_button_keeps_state(self, conversation, store, messenger):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        messenger.clear()

        _send(conversation, payload="CONFIRM_ORDER")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_NAME
        assert len(state.cart) == 1
        assert "complete your current step" in messenger.text_for(USER)

    def test_confirm_twice_creates_one_order(self, conversation, session_factory):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        _send(conversation, text="Ana")
        _send(conversation, payload="PICKUP")
        _send(conversation, payload="CONFIRM_ORDER")

        _send(conversation, payload="CONFIRM_ORDER")

        db = session_factory()
        try:
            assert db.query(Order).count() == 1
        finally:
            db.close()

    def test_text_in_awaiting_quantity_reprompts(self, conversation, store, messenger):
        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        _send(conversation, payload="ORDER_CHOCOLATE_CAKE")
        messenger.clear()

        _send(conversation, text="lots please")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_QUANTITY
        assert state.pending_item.product == "Chocolate Cake"
        assert "How many" in messenger.text_for(USER)


# =============================================================================
# Navigation
# =============================================================================

class TestNavigation:

    def test_language_by_text(self, conversation, store):
        _send(conversation, text="hi")
        assert store.get(USER).state == ConversationState.LANGUAGE_SELECTION

        _send(conversation, text="Myanmar")
        state = store.get(USER)
        assert state.language == "my"
        assert state.state == ConversationState.MAIN_MENU

    def test_main_menu_is_carousel(self, conversation, messenger):
        _start_english(conversation)
        messages = messenger.messages_for(USER)
        assert messages[-1].kind == MessageKind.CAROUSEL
        payloads = [b.payload for e in messages[-1].elements for b in e.buttons]
        assert "MENU_ORDER_PRODUCTS" in payloads
        assert "QUICK_SHOP" in payloads

    def test_back_from_quantity_returns_to_products(self, conversation, store):
        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        _send(conversation, payload="ORDER_CHOCOLATE_CAKE")

        _send(conversation, payload="GO_BACK")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_PRODUCT
        assert state.pending_item is None

    def test_back_from_confirming_keeps_cart(self, conversation, store):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="CHECKOUT")
        _send(conversation, text="Ana")
        _send(conversation, payload="PICKUP")

        _send(conversation, payload="GO_BACK")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_DELIVERY_TYPE
        assert state.total_quantity() == 2

    def test_checkout_with_empty_cart(self, conversation, store, messenger):
        _start_english(conversation)
        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        # Only reachable through a cart decision; force it
        store.get(USER).state = ConversationState.AWAITING_CART_DECISION
        messenger.clear()

        _send(conversation, payload="CHECKOUT")

        assert store.get(USER).state == ConversationState.MAIN_MENU
        assert "cart is empty" in messenger.text_for(USER)

    def test_closed_bakery_blocks_browsing(self, conversation, store, messenger, business_hours):
        _start_english(conversation)
        business_hours.is_open = False
        messenger.clear()

        _send(conversation, payload="MENU_ORDER_PRODUCTS")

        assert store.get(USER).state == ConversationState.MAIN_MENU
        assert "closed" in messenger.text_for(USER)

    def test_about(self, conversation, messenger):
        _start_english(conversation)
        messenger.clear()
        _send(conversation, payload="MENU_ABOUT")
        assert "About Us" in messenger.text_for(USER)

    def test_empty_event_is_ignored(self, conversation, store, messenger):
        result = conversation.handle_inbound_event(USER, text="   ")
        assert result.messages == []
        assert USER not in store
        assert messenger.sent == []


# =============================================================================
# Quick order
# =============================================================================

class TestQuickOrder:

    def test_quick_add_increments_line(self, conversation, store):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        assert store.get(USER).state == ConversationState.QUICK_ORDERING

        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CAKE")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CAKE")
        _send(conversation, payload="QUICK_VIEW_QUICK_ORDER_CROISSANT")

        cart = store.get(USER).cart
        assert [(i.product, i.quantity) for i in cart] == [("Chocolate Cake", 2), ("Croissant", 1)]

    def test_quick_checkout_and_back(self, conversation, store):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_VANILLA")

        _send(conversation, payload="QUICK_CHECKOUT")
        assert store.get(USER).state == ConversationState.AWAITING_NAME

        _send(conversation, payload="GO_BACK")
        assert store.get(USER).state == ConversationState.QUICK_ORDERING

    def test_quick_checkout_with_empty_cart(self, conversation, store, messenger):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        messenger.clear()

        _send(conversation, payload="QUICK_CHECKOUT")

        assert store.get(USER).state == ConversationState.QUICK_ORDERING
        assert "Cart is empty" in messenger.text_for(USER)

    def test_quick_clear(self, conversation, store):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CINNAMON")

        _send(conversation, payload="QUICK_CLEAR_CART")

        assert store.get(USER).cart == []
        assert store.get(USER).quick_order is False

    def test_back_after_switching_to_full_flow(self, conversation, store):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CINNAMON")
        _send(conversation, payload="QUICK_CLEAR_CART")

        _send(conversation, payload="MENU_ORDER_PRODUCTS")
        _send(conversation, payload="ORDER_CHOCOLATE_CAKE")
        _send(conversation, payload="QTY_2")
        _send(conversation, payload="CHECKOUT")
        _send(conversation, payload="GO_BACK")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_CART_DECISION
        assert [(i.product, i.quantity) for i in state.cart] == [("Chocolate Cake", 2)]

    def test_quick_order_completes(self, conversation, session_factory):
        _start_english(conversation)
        _send(conversation, payload="QUICK_SHOP")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CROISSANT")
        _send(conversation, payload="QUICK_ADD_QUICK_ORDER_CROISSANT")
        _send(conversation, payload="QUICK_CHECKOUT")
        _send(conversation, text="Min")
        _send(conversation, text="pickup")

        result = _send(conversation, payload="CONFIRM_ORDER")

        db = session_factory()
        try:
            order = db.get(Order, result.order_id)
            assert order.total_items == 2
            assert order.subtotal == 9.0
        finally:
            db.close()


# =============================================================================
# History, reorder and rating
# =============================================================================

class TestHistory:

    def test_no_orders(self, conversation, messenger):
        _start_english(conversation)
        messenger.clear()
        _send(conversation, payload="MENU_ORDER_HISTORY")
        assert "don't have any orders" in messenger.text_for(USER)

    def test_history_lists_orders_with_buttons(self, conversation, messenger, make_order):
        first = make_order(status="delivered")
        second = make_order(status="pending")
        make_order(sender_id="someone-else")
        _start_english(conversation)
        messenger.clear()

        _send(conversation, payload="MENU_ORDER_HISTORY")

        message = messenger.messages_for(USER)[-1]
        payloads = [r.payload for r in message.quick_replies]
        assert f"REORDER_{first}" in payloads
        assert f"REORDER_{second}" in payloads
        assert f"RATE_ORDER_{first}" in payloads
        assert f"RATE_ORDER_{second}" not in payloads
        assert message.text.count("#") == 2

    def test_reorder_copies_items(self, conversation, store, session_factory, make_order):
        previous = make_order(items=(("Croissant", 3, 4.5), ("Coffee", 1, 5.0)))

        _send(conversation, payload=f"REORDER_{previous}")

        state = store.get(USER)
        assert state.state == ConversationState.AWAITING_NAME
        assert state.reordered_from == previous
        assert [(i.product, i.quantity) for i in state.cart] == [("Croissant", 3), ("Coffee", 1)]

        _send(conversation, text="Ana")
        _send(conversation, payload="PICKUP")
        result = _send(conversation, payload="CONFIRM_ORDER")

        db = session_factory()
        try:
            assert db.get(Order, result.order_id).reordered_from == previous
        finally:
            db.close()

    def test_reorder_of_someone_elses_order(self, conversation, store, messenger, make_order):
        other = make_order(sender_id="someone-else")

        _send(conversation, payload=f"REORDER_{other}")

        assert "couldn't find that order" in messenger.text_for(USER)
        assert store.get(USER).cart == []

    def test_rate_delivered_order(self, conversation, store, session_factory, make_order):
        order_id = make_order(status="delivered")
        _start_english(conversation)

        _send(conversation, payload=f"RATE_ORDER_{order_id}")
        assert store.get(USER).state == ConversationState.AWAITING_RATING

        _send(conversation, payload="RATING_4")

        state = store.get(USER)
        assert state.state == ConversationState.MAIN_MENU
        assert state.language == "en"
        db = session_factory()
        try:
            rating = db.query(Rating).filter(Rating.order_id == order_id).one()
            assert rating.stars == 4
            assert rating.user_id == USER
            assert db.get(Order, order_id).rating_id == rating.id
        finally:
            db.close()

    def test_rate_by_typing_stars(self, conversation, session_factory, make_order):
        order_id = make_order(status="delivered")
        _send(conversation, payload=f"RATE_ORDER_{order_id}")

        _send(conversation, text="5 stars")

        db = session_factory()
        try:
            assert db.query(Rating).filter(Rating.order_id == order_id).one().stars == 5
        finally:
            db.close()

    def test_rate_undelivered_order(self, conversation, store, messenger, make_order):
        order_id = make_order(status="preparing")
        _start_english(conversation)
        messenger.clear()

        _send(conversation, payload=f"RATE_ORDER_{order_id}")

        assert store.get(USER).state == ConversationState.MAIN_MENU
        assert "once it has been delivered" in messenger.text_for(USER)

    def test_rate_twice(self, conversation, messenger, session_factory, make_order):
        order_id = make_order(status="delivered")
        _send(conversation, payload=f"RATE_ORDER_{order_id}")
        _send(conversation, payload="RATING_5")
        messenger.clear()

        _send(conversation, payload=f"RATE_ORDER_{order_id}")

        assert "already rated" in messenger.text_for(USER)
        db = session_factory()
        try:
            assert db.query(Rating).count() == 1
        finally:
            db.close()

    def test_skip_rating(self, conversation, store, make_order):
        order_id = make_order(status="delivered")
        _send(conversation, payload=f"RATE_ORDER_{order_id}")

        _send(conversation, payload="SKIP_RATING")

        assert store.get(USER).state == ConversationState.MAIN_MENU


# =============================================================================
# Delivery of outbound messages
# =============================================================================

class TestDelivery:

    def test_send_failure_does_not_undo_state(self, conversation, store, messenger):
        messenger.fail = True

        result = _send(conversation, payload="GET_STARTED")

        assert result.messages
        assert store.get(USER).state == ConversationState.LANGUAGE_SELECTION

    def test_users_are_independent(self, conversation, store):
        _cart_with_two_chocolate_cakes(conversation)
        _send(conversation, payload="QUICK_SHOP", user="user-2")

        assert store.get(USER).state == ConversationState.AWAITING_CART_DECISION
        assert store.get("user-2").state == ConversationState.QUICK_ORDERING
        assert store.get("user-2").cart == []
