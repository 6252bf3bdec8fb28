"""
Parsers Package.

This package contains the parsing functions and constants used by the
state machine for interpreting user input.

Exports:
- Constants: Number words, keyword sets, product tokens, quick-order catalog
- Deterministic Parsers: Keyword and regex based free-text parsing
"""

from .constants import (
    WORD_TO_NUM,
    MIN_QUANTITY,
    MAX_QUANTITY,
    MIN_STARS,
    MAX_STARS,
    CANCEL_KEYWORDS,
    MENU_KEYWORDS,
    GREETING_KEYWORDS,
    HELP_KEYWORDS,
    NAMED_PRODUCT_TOKENS,
    QUICK_ORDER_PRODUCTS,
    CATEGORY_EMOJIS,
    DEFAULT_EMOJI,
    emoji_for_category,
)

from .deterministic import (
    normalize_text,
    parse_number,
    parse_delivery_type,
    parse_language,
    parse_keyword,
    match_product_name,
)

__all__ = [
    # Constants
    "WORD_TO_NUM",
    "MIN_QUANTITY",
    "MAX_QUANTITY",
    "MIN_STARS",
    "MAX_STARS",
    "CANCEL_KEYWORDS",
    "MENU_KEYWORDS",
    "GREETING_KEYWORDS",
    "HELP_KEYWORDS",
    "NAMED_PRODUCT_TOKENS",
    "QUICK_ORDER_PRODUCTS",
    "CATEGORY_EMOJIS",
    "DEFAULT_EMOJI",
    "emoji_for_category",
    # Deterministic parsers
    "normalize_text",
    "parse_number",
    "parse_delivery_type",
    "parse_language",
    "parse_keyword",
    "match_product_name",
]
