"""
Parser Constants.

This module contains constants used by the action and free-text parsers
for recognizing and normalizing user input: button tokens, keyword sets,
number words and the fixed quick-order catalog.
"""

# =============================================================================
# Number Mapping
# =============================================================================

WORD_TO_NUM = {
    "one": 1, "a": 1, "an": 1, "single": 1,
    "two": 2, "couple": 2, "a couple": 2,
    "three": 3,
    "four": 4,
    "five": 5,
}

# Closed quantity menu offered after a product is picked
MIN_QUANTITY = 1
MAX_QUANTITY = 5

MIN_STARS = 1
MAX_STARS = 5


# =============================================================================
# Free-text Keywords
# =============================================================================
# Matched against the whole normalized message, never a substring, so a name
# or address that happens to contain "order" is not mistaken for a command.

CANCEL_KEYWORDS = {"cancel", "start over", "stop", "cancel order", "restart"}
MENU_KEYWORDS = {"menu", "order", "show menu", "products", "show products", "i want to order"}
GREETING_KEYWORDS = {"hi", "hello", "hey", "start", "get started", "mingalaba"}
HELP_KEYWORDS = {"help", "how to order", "?"}

PICKUP_WORDS = ("pickup", "pick up", "pick-up", "collect", "self pickup")
DELIVERY_WORDS = ("deliver", "delivery")

ENGLISH_WORDS = {"english", "en", "eng"}
MYANMAR_WORDS = {"myanmar", "burmese", "my", "မြန်မာ"}


# =============================================================================
# Product Tokens
# =============================================================================
# Fixed product buttons map to catalog keys.

NAMED_PRODUCT_TOKENS = {
    "ORDER_CHOCOLATE_CAKE": "Chocolate Cake",
    "ORDER_VANILLA_CAKE": "Vanilla Cake",
    "ORDER_RED_VELVET": "Red Velvet Cake",
    "ORDER_CROISSANT": "Croissant",
    "ORDER_CINNAMON_ROLL": "Cinnamon Roll",
    "ORDER_CUPCAKE": "Chocolate Cupcake",
    "ORDER_CHOCOLATE_CUPCAKE": "Chocolate Cupcake",
    "ORDER_COFFEE": "Coffee",
    "ORDER_BREAD": "Bread",
}

# Quick-order keys (QUICK_ADD_<key>) -> (product, emoji)
QUICK_ORDER_PRODUCTS = {
    "QUICK_ORDER_CAKE": ("Chocolate Cake", "🍰"),
    "QUICK_ORDER_VANILLA": ("Vanilla Cake", "🎂"),
    "QUICK_ORDER_CROISSANT": ("Croissant", "🥐"),
    "QUICK_ORDER_CINNAMON": ("Cinnamon Roll", "🌀"),
}

# Display emoji for catalog products by category
CATEGORY_EMOJIS = {
    "cakes": "🎂",
    "cupcakes": "🧁",
    "coffee": "☕",
    "bread": "🍞",
    "muffins": "🧁",
    "tarts": "🥧",
    "pastries": "🥐",
}
DEFAULT_EMOJI = "🍰"


def emoji_for_category(category: str | None) -> str:
    """Return the display emoji for a product category."""
    if not category:
        return DEFAULT_EMOJI
    return CATEGORY_EMOJIS.get(category.lower(), DEFAULT_EMOJI)
