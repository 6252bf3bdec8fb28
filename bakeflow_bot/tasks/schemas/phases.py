"""
Conversation State Definitions.

This module defines the ConversationState enum representing where a user is
in the ordering flow.
"""

from enum import Enum


class ConversationState(str, Enum):
    """Steps of the chat ordering flow."""
    LANGUAGE_SELECTION = "language_selection"  # Initial state for every new user
    GREETING = "greeting"
    MAIN_MENU = "main_menu"
    AWAITING_PRODUCT = "awaiting_product"
    AWAITING_QUANTITY = "awaiting_quantity"
    AWAITING_CART_DECISION = "awaiting_cart_decision"  # Add more or checkout
    AWAITING_NAME = "awaiting_name"
    AWAITING_DELIVERY_TYPE = "awaiting_delivery_type"
    AWAITING_ADDRESS = "awaiting_address"  # Delivery orders only
    CONFIRMING = "confirming"
    QUICK_ORDERING = "quick_ordering"  # Abbreviated cart building path
    AWAITING_RATING = "awaiting_rating"
