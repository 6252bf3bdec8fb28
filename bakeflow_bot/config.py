"""
Configuration Module for BakeFlow Bot
=====================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the BakeFlow application. All environment variables
and defaults are defined here and parsed at module load time, so a bad value
fails at startup instead of halfway through a conversation.

Configuration Categories:
-------------------------
- **Database**: SQLAlchemy connection URL.

- **Messenger**: Page access token and webhook verify token for the messaging
  platform. Without a page token the bot runs in mock mode and only logs what
  it would have sent.

- **Pricing**: Flat delivery fee and the fallback unit price used when a cart
  item cannot be found in the catalog.

- **Business Hours**: Opening window consulted before a customer can browse
  products.

- **Conversation State**: Idle TTL for in-memory conversation state.

- **Notifications**: Size of the background pool used for order status
  notifications.

- **Rate Limiting / CORS**: Webhook throttling and allowed origins.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./bakeflow.db")
- PAGE_ACCESS_TOKEN: Messenger page token (default: unset, mock mode)
- VERIFY_TOKEN: Webhook verification token (default: "bakeflow-verify")
- GRAPH_API_VERSION: Graph API version (default: "v18.0")
- DELIVERY_FEE: Flat delivery fee (default: 2.99)
- DEFAULT_UNIT_PRICE: Price used on a catalog miss (default: 20.00)
- BUSINESS_HOURS_ENABLED: Enforce opening hours (default: "true")
- BUSINESS_OPEN_HOUR / BUSINESS_CLOSE_HOUR: 24h clock (default: 8 / 20)
- BUSINESS_TIMEZONE: IANA zone name (default: "Asia/Yangon")
- STATE_TTL_SECONDS: Idle conversation TTL (default: 86400)
- NOTIFIER_MAX_WORKERS: Notification pool size (default: 4)
- RATE_LIMIT_WEBHOOK: Webhook rate limit (default: "120 per minute")
- RATE_LIMIT_CHAT_ORDERS: Order form rate limit (default: "20 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from bakeflow_bot.config import DELIVERY_FEE, DEFAULT_UNIT_PRICE
"""

import os
from typing import List


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./bakeflow.db")


# =============================================================================
# Messenger Configuration
# =============================================================================
# Credentials for the Messenger Send API and the webhook handshake.

PAGE_ACCESS_TOKEN: str = os.getenv("PAGE_ACCESS_TOKEN", "")
VERIFY_TOKEN: str = os.getenv("VERIFY_TOKEN", "bakeflow-verify")
GRAPH_API_VERSION: str = os.getenv("GRAPH_API_VERSION", "v18.0")

# Request timeout for outbound Send API calls (seconds)
MESSENGER_TIMEOUT: int = int(os.getenv("MESSENGER_TIMEOUT", "10"))


# =============================================================================
# Pricing Configuration
# =============================================================================

# Flat fee charged on delivery orders. Pickup orders are always free.
DELIVERY_FEE: float = float(os.getenv("DELIVERY_FEE", "2.99"))

# Unit price used when a cart item is not found in the catalog
DEFAULT_UNIT_PRICE: float = float(os.getenv("DEFAULT_UNIT_PRICE", "20.00"))

# Label stored as the address of pickup orders
PICKUP_ADDRESS_LABEL = "Pickup at store"


# =============================================================================
# Business Hours Configuration
# =============================================================================
# Customers can only start browsing products while the bakery is open.

BUSINESS_HOURS_ENABLED: bool = os.getenv("BUSINESS_HOURS_ENABLED", "true").lower() == "true"
BUSINESS_OPEN_HOUR: int = int(os.getenv("BUSINESS_OPEN_HOUR", "8"))
BUSINESS_CLOSE_HOUR: int = int(os.getenv("BUSINESS_CLOSE_HOUR", "20"))
BUSINESS_TIMEZONE: str = os.getenv("BUSINESS_TIMEZONE", "Asia/Yangon")


# =============================================================================
# Conversation State Configuration
# =============================================================================
# Conversation state lives in memory. Users idle longer than the TTL are
# evicted and start again at language selection.

STATE_TTL_SECONDS: int = int(os.getenv("STATE_TTL_SECONDS", "86400"))  # 24 hours


# =============================================================================
# Notification Configuration
# =============================================================================

# Worker threads used for order status notifications
NOTIFIER_MAX_WORKERS: int = int(os.getenv("NOTIFIER_MAX_WORKERS", "4"))


# =============================================================================
# Rate Limiting Configuration
# =============================================================================

RATE_LIMIT_WEBHOOK: str = os.getenv("RATE_LIMIT_WEBHOOK", "120 per minute")
RATE_LIMIT_CHAT_ORDERS: str = os.getenv("RATE_LIMIT_CHAT_ORDERS", "20 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_webhook() -> str:
    """
    Return the current webhook rate limit.

    Allows tests to override the limit without touching the module constant.
    """
    return RATE_LIMIT_WEBHOOK


def get_rate_limit_chat_orders() -> str:
    return RATE_LIMIT_CHAT_ORDERS


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins, e.g. "https://admin.bakeflow.app"
# Default "*" allows all origins (development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]
