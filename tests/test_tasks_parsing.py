"""
Unit tests for payload and free-text parsing.

Run with: pytest tests/test_tasks_parsing.py -v
"""

import pytest

from bakeflow_bot.tasks.actions import Action, ActionType, interpret_text, parse_action
from bakeflow_bot.tasks.parsers import (
    match_product_name,
    normalize_text,
    parse_delivery_type,
    parse_keyword,
    parse_language,
    parse_number,
)
from bakeflow_bot.tasks.schemas import ConversationState


# =============================================================================
# Deterministic parsers
# =============================================================================

class TestParseNumber:

    @pytest.mark.parametrize("text,expected", [
        ("2", 2),
        ("two", 2),
        ("Three!", 3),
        ("3 pcs", 3),
        ("a couple", 2),
        ("five please", 5),
        ("၂", 2),
    ])
    def test_valid(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["0", "6", "9", "lots", "", "two cakes and a coffee"])
    def test_out_of_range_or_unknown(self, text):
        assert parse_number(text) is None

    def test_custom_range(self):
        assert parse_number("5 stars", low=1, high=5) == 5
        assert parse_number("7", low=1, high=10) == 7


def test_normalize_text():
    assert normalize_text("  Hello   THERE!! ") == "hello there"
    assert normalize_text("?") == "?"


def test_parse_delivery_type():
    assert parse_delivery_type("I'll pick up") == "pickup"
    assert parse_delivery_type("Pickup") == "pickup"
    assert parse_delivery_type("delivery please") == "delivery"
    assert parse_delivery_type("tomorrow") is None


def test_parse_language():
    assert parse_language("English") == "en"
    assert parse_language("burmese") == "my"
    assert parse_language("french") is None


class TestParseKeyword:

    def test_whole_message_only(self):
        assert parse_keyword("Cancel!") == "cancel"
        assert parse_keyword("start over") == "cancel"
        assert parse_keyword("menu") == "menu"
        assert parse_keyword("hello") == "greeting"
        assert parse_keyword("help") == "help"

    def test_words_inside_data_are_not_keywords(self):
        assert parse_keyword("12 Order Street") is None
        assert parse_keyword("Stop Lane 4") is None


class TestMatchProductName:
    NAMES = ["Chocolate Cake", "Chocolate Cupcake", "Coffee", "Bread"]

    def test_finds_name_inside_sentence(self):
        assert match_product_name("I want chocolate cake", self.NAMES) == "Chocolate Cake"

    def test_longest_name_wins(self):
        names = ["Cake", "Chocolate Cake"]
        assert match_product_name("chocolate cake please", names) == "Chocolate Cake"

    def test_word_boundaries(self):
        assert match_product_name("chocolate cupcake", self.NAMES) == "Chocolate Cupcake"
        assert match_product_name("breadsticks", self.NAMES) is None

    def test_no_match(self):
        assert match_product_name("something sweet", self.NAMES) is None


# =============================================================================
# Button payloads
# =============================================================================

class TestParseAction:

    @pytest.mark.parametrize("payload,expected", [
        ("LANG_EN", Action(ActionType.LANG_EN)),
        ("CHECKOUT", Action(ActionType.CHECKOUT)),
        ("QUICK_ADD_MORE", Action(ActionType.QUICK_ADD_MORE)),
        ("QTY_2", Action(ActionType.QUANTITY, 2)),
        ("RATING_5", Action(ActionType.RATING, 5)),
        ("ORDER_PRODUCT_7", Action(ActionType.ORDER_PRODUCT, 7)),
        ("REORDER_12", Action(ActionType.REORDER, 12)),
        ("RATE_ORDER_3", Action(ActionType.RATE_ORDER, 3)),
        ("ORDER_CUPCAKE", Action(ActionType.SELECT_PRODUCT, "Chocolate Cupcake")),
        ("ORDER_RED_VELVET", Action(ActionType.SELECT_PRODUCT, "Red Velvet Cake")),
        ("QUICK_ADD_QUICK_ORDER_CAKE", Action(ActionType.QUICK_ADD, "QUICK_ORDER_CAKE")),
        ("QUICK_VIEW_QUICK_ORDER_CROISSANT", Action(ActionType.QUICK_ADD, "QUICK_ORDER_CROISSANT")),
    ])
    def test_known_payloads(self, payload, expected):
        assert parse_action(payload) == expected

    @pytest.mark.parametrize("payload", ["", "QTY_0", "QTY_6", "RATING_9", "NOT_A_BUTTON", "ORDER_PRODUCT_abc"])
    def test_unknown_payloads(self, payload):
        assert parse_action(payload) is None


# =============================================================================
# Free text in context
# =============================================================================

class TestInterpretText:

    def test_cancel_anywhere(self):
        for state in ConversationState:
            assert interpret_text(state, "cancel").type == ActionType.CANCEL_ORDER

    def test_greeting_depends_on_language(self):
        assert interpret_text(ConversationState.MAIN_MENU, "hi").type == ActionType.MENU_ORDER
        assert interpret_text(ConversationState.LANGUAGE_SELECTION, "hi", has_language=False).type == ActionType.GET_STARTED

    def test_menu_needs_language(self):
        assert interpret_text(ConversationState.MAIN_MENU, "menu").type == ActionType.MENU_ORDER_PRODUCTS
        action = interpret_text(ConversationState.LANGUAGE_SELECTION, "menu", has_language=False)
        assert action.type == ActionType.TEXT

    def test_quantity_word(self):
        assert interpret_text(ConversationState.AWAITING_QUANTITY, "three") == Action(ActionType.QUANTITY, 3)

    def test_quantity_word_outside_quantity_step_is_text(self):
        assert interpret_text(ConversationState.AWAITING_NAME, "three") == Action(ActionType.TEXT, "three")

    def test_name_is_text(self):
        assert interpret_text(ConversationState.AWAITING_NAME, "  Ana ") == Action(ActionType.TEXT, "Ana")

    def test_delivery_type(self):
        assert interpret_text(ConversationState.AWAITING_DELIVERY_TYPE, "pickup").type == ActionType.PICKUP
        assert interpret_text(ConversationState.AWAITING_DELIVERY_TYPE, "deliver it").type == ActionType.DELIVERY

    def test_rating_stars(self):
        assert interpret_text(ConversationState.AWAITING_RATING, "4") == Action(ActionType.RATING, 4)

    def test_product_name(self):
        action = interpret_text(
            ConversationState.AWAITING_PRODUCT,
            "I'd like a croissant",
            product_names=["Croissant", "Coffee"],
        )
        assert action == Action(ActionType.SELECT_PRODUCT, "Croissant")

    def test_language(self):
        assert interpret_text(ConversationState.LANGUAGE_SELECTION, "english", has_language=False).type == ActionType.LANG_EN
