"""
Inbound Actions.

Every inbound event is turned into an Action before the state machine sees
it. Button payloads map to action tokens; free text is interpreted against
the user's current state. Unknown payloads map to None and hit the
state machine's fail-safe reset.
"""

from dataclasses import dataclass
from enum import Enum
import re

from .schemas import ConversationState
from .parsers import (
    MIN_STARS,
    MAX_STARS,
    NAMED_PRODUCT_TOKENS,
    parse_number,
    parse_delivery_type,
    parse_language,
    parse_keyword,
    match_product_name,
)


class ActionType(str, Enum):
    """Kinds of inbound action."""
    # Language and navigation
    LANG_EN = "LANG_EN"
    LANG_MY = "LANG_MY"
    GET_STARTED = "GET_STARTED"
    MENU_ORDER = "MENU_ORDER"
    MENU_ORDER_PRODUCTS = "MENU_ORDER_PRODUCTS"
    MENU_ORDER_HISTORY = "MENU_ORDER_HISTORY"
    MENU_ABOUT = "MENU_ABOUT"
    MENU_HELP = "MENU_HELP"
    MENU_CHANGE_LANG = "MENU_CHANGE_LANG"
    SHOW_MENU = "SHOW_MENU"
    GO_BACK = "GO_BACK"
    MAIN_MENU = "MAIN_MENU"

    # Cart building
    SELECT_PRODUCT = "SELECT_PRODUCT"  # arg: catalog key
    ORDER_PRODUCT = "ORDER_PRODUCT"  # arg: catalog id
    QUANTITY = "QUANTITY"  # arg: 1-5
    ADD_MORE_ITEMS = "ADD_MORE_ITEMS"
    CHECKOUT = "CHECKOUT"

    # Checkout
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"
    CONFIRM_ORDER = "CONFIRM_ORDER"
    CANCEL_ORDER = "CANCEL_ORDER"

    # Quick order
    QUICK_SHOP = "QUICK_SHOP"
    QUICK_ADD_MORE = "QUICK_ADD_MORE"
    QUICK_ADD = "QUICK_ADD"  # arg: quick-order key
    QUICK_SHOW_CART = "QUICK_SHOW_CART"
    QUICK_CHECKOUT = "QUICK_CHECKOUT"
    QUICK_CLEAR_CART = "QUICK_CLEAR_CART"

    # History and rating
    REORDER = "REORDER"  # arg: order id
    RATE_ORDER = "RATE_ORDER"  # arg: order id
    RATING = "RATING"  # arg: 1-5
    SKIP_RATING = "SKIP_RATING"

    # Free text the current step consumes as data (name, address)
    TEXT = "TEXT"


@dataclass(frozen=True)
class Action:
    type: ActionType
    arg: int | str | None = None


# Payloads that carry no argument and share their action's name
_SIMPLE_TOKENS = {
    ActionType.LANG_EN, ActionType.LANG_MY, ActionType.GET_STARTED,
    ActionType.MENU_ORDER, ActionType.MENU_ORDER_PRODUCTS, ActionType.MENU_ORDER_HISTORY,
    ActionType.MENU_ABOUT, ActionType.MENU_HELP, ActionType.MENU_CHANGE_LANG,
    ActionType.SHOW_MENU, ActionType.GO_BACK, ActionType.MAIN_MENU,
    ActionType.ADD_MORE_ITEMS, ActionType.CHECKOUT,
    ActionType.PICKUP, ActionType.DELIVERY, ActionType.CONFIRM_ORDER, ActionType.CANCEL_ORDER,
    ActionType.QUICK_SHOP, ActionType.QUICK_ADD_MORE, ActionType.QUICK_SHOW_CART,
    ActionType.QUICK_CHECKOUT, ActionType.QUICK_CLEAR_CART, ActionType.SKIP_RATING,
}
_SIMPLE_PAYLOADS = {action.value: action for action in _SIMPLE_TOKENS}

_QTY_PATTERN = re.compile(r"^QTY_([1-5])$")
_RATING_PATTERN = re.compile(r"^RATING_([1-5])$")
_ORDER_PRODUCT_PATTERN = re.compile(r"^ORDER_PRODUCT_(\d+)$")
_REORDER_PATTERN = re.compile(r"^REORDER_(\d+)$")
_RATE_ORDER_PATTERN = re.compile(r"^RATE_ORDER_(\d+)$")
_QUICK_ADD_PATTERN = re.compile(r"^QUICK_(?:ADD|VIEW)_(\w+)$")


def parse_action(payload: str) -> Action | None:
    """
    Map a button payload to an Action.

    Returns None for payloads the bot does not know.

    Examples:
        "QTY_2" -> Action(QUANTITY, 2)
        "ORDER_PRODUCT_7" -> Action(ORDER_PRODUCT, 7)
        "QUICK_VIEW_QUICK_ORDER_CAKE" -> Action(QUICK_ADD, "QUICK_ORDER_CAKE")
    """
    payload = (payload or "").strip()
    if not payload:
        return None

    simple = _SIMPLE_PAYLOADS.get(payload)
    if simple is not None:
        return Action(simple)

    if payload in NAMED_PRODUCT_TOKENS:
        return Action(ActionType.SELECT_PRODUCT, NAMED_PRODUCT_TOKENS[payload])

    patterns = (
        (_QTY_PATTERN, ActionType.QUANTITY, int),
        (_RATING_PATTERN, ActionType.RATING, int),
        (_ORDER_PRODUCT_PATTERN, ActionType.ORDER_PRODUCT, int),
        (_REORDER_PATTERN, ActionType.REORDER, int),
        (_RATE_ORDER_PATTERN, ActionType.RATE_ORDER, int),
        (_QUICK_ADD_PATTERN, ActionType.QUICK_ADD, str),
    )
    for pattern, action_type, convert in patterns:
        match = pattern.match(payload)
        if match:
            return Action(action_type, convert(match.group(1)))

    return None


def interpret_text(
    state: ConversationState,
    text: str,
    product_names: list[str] | None = None,
    has_language: bool = True,
) -> Action:
    """
    Interpret free text in the context of the current state.

    Global keywords win first; then the current step gets a chance to read
    the text as its own button (quantity word, pickup/delivery, stars...).
    Anything else becomes a TEXT action that only data-collecting steps accept.
    """
    keyword = parse_keyword(text)
    if keyword == "cancel":
        return Action(ActionType.CANCEL_ORDER)
    if keyword == "help":
        return Action(ActionType.MENU_HELP)
    if keyword == "greeting":
        return Action(ActionType.MENU_ORDER if has_language else ActionType.GET_STARTED)
    if keyword == "menu" and has_language:
        return Action(ActionType.MENU_ORDER_PRODUCTS)

    if state == ConversationState.LANGUAGE_SELECTION:
        language = parse_language(text)
        if language == "en":
            return Action(ActionType.LANG_EN)
        if language == "my":
            return Action(ActionType.LANG_MY)

    elif state == ConversationState.AWAITING_QUANTITY:
        quantity = parse_number(text)
        if quantity is not None:
            return Action(ActionType.QUANTITY, quantity)

    elif state == ConversationState.AWAITING_DELIVERY_TYPE:
        delivery_type = parse_delivery_type(text)
        if delivery_type == "pickup":
            return Action(ActionType.PICKUP)
        if delivery_type == "delivery":
            return Action(ActionType.DELIVERY)

    elif state == ConversationState.AWAITING_RATING:
        stars = parse_number(text, low=MIN_STARS, high=MAX_STARS)
        if stars is not None:
            return Action(ActionType.RATING, stars)

    elif state == ConversationState.AWAITING_PRODUCT and product_names:
        product = match_product_name(text, product_names)
        if product:
            return Action(ActionType.SELECT_PRODUCT, product)

    return Action(ActionType.TEXT, text.strip())
