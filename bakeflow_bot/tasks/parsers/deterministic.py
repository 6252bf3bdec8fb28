"""
Deterministic Parsers.

Regex and keyword based interpretation of free text. Each function returns
None when the text does not fit, leaving the caller to re-prompt.
"""

import re

from .constants import (
    WORD_TO_NUM,
    MIN_QUANTITY,
    MAX_QUANTITY,
    CANCEL_KEYWORDS,
    MENU_KEYWORDS,
    GREETING_KEYWORDS,
    HELP_KEYWORDS,
    PICKUP_WORDS,
    DELIVERY_WORDS,
    ENGLISH_WORDS,
    MYANMAR_WORDS,
)

# Burmese digits ၀-၉
_MYANMAR_DIGITS = str.maketrans("၀၁၂၃၄၅၆၇၈၉", "0123456789")

_TRAILING_PUNCT = re.compile(r"[\s!.?,]+$")
_NUMBER_PATTERN = re.compile(r"^(\d+)(?:\s*(?:x|pcs?|pieces?|stars?))?$")
_WORD_NUMBER_PATTERN = re.compile(r"^([a-z ]+?)(?:\s+(?:please|pcs?|pieces?|stars?))?$")


def normalize_text(text: str) -> str:
    """Lowercase, trim, collapse whitespace and strip trailing punctuation."""
    text = " ".join(text.strip().lower().split())
    if text == "?":
        return text
    return _TRAILING_PUNCT.sub("", text)


def parse_number(text: str, low: int = MIN_QUANTITY, high: int = MAX_QUANTITY) -> int | None:
    """
    Parse a small number given as digits or a word.

    Examples:
        "2" -> 2, "two" -> 2, "3 pcs" -> 3, "၂" -> 2, "9" -> None
    """
    normalized = normalize_text(text).translate(_MYANMAR_DIGITS)
    if not normalized:
        return None

    value = None
    digit_match = _NUMBER_PATTERN.match(normalized)
    if digit_match:
        value = int(digit_match.group(1))
    else:
        word_match = _WORD_NUMBER_PATTERN.match(normalized)
        if word_match:
            value = WORD_TO_NUM.get(word_match.group(1).strip())

    if value is None or not (low <= value <= high):
        return None
    return value


def parse_delivery_type(text: str) -> str | None:
    """Return "pickup" or "delivery" when the text names one of them."""
    normalized = normalize_text(text)
    if any(word in normalized for word in PICKUP_WORDS):
        return "pickup"
    if any(word in normalized for word in DELIVERY_WORDS):
        return "delivery"
    return None


def parse_language(text: str) -> str | None:
    normalized = normalize_text(text)
    if normalized in ENGLISH_WORDS:
        return "en"
    if normalized in MYANMAR_WORDS:
        return "my"
    return None


def parse_keyword(text: str) -> str | None:
    """
    Match a whole message against the global keyword sets.

    Returns one of "cancel", "menu", "greeting", "help" or None.
    """
    normalized = normalize_text(text)
    if normalized in CANCEL_KEYWORDS:
        return "cancel"
    if normalized in HELP_KEYWORDS:
        return "help"
    if normalized in MENU_KEYWORDS:
        return "menu"
    if normalized in GREETING_KEYWORDS:
        return "greeting"
    return None


def match_product_name(text: str, product_names: list[str]) -> str | None:
    """
    Find the product a message refers to, e.g. "I want chocolate cake".

    Names match on word boundaries; the longest matching name wins.
    """
    normalized = normalize_text(text)
    if not normalized:
        return None
    best = None
    for name in product_names:
        lowered = name.lower()
        if re.search(r"\b" + re.escape(lowered) + r"\b", normalized):
            if best is None or len(lowered) > len(best.lower()):
                best = name
    return best
