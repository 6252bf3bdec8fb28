"""
Schemas Package for BakeFlow
============================

Pydantic models used for API request validation and response serialization.

Schema Organization:
--------------------
- **orders.py**: Admin order listing, detail and status update schemas
- **webhook.py**: Messenger webhook payloads
- **chat_orders.py**: Messenger order form request and response

Naming Conventions:
-------------------
- *Out: Response models (e.g., OrderOut) - what API returns
- *Request: Request bodies (e.g., StatusUpdateRequest)
- *Response: Wrapped responses (e.g., OrderListResponse)

Pydantic Configuration:
-----------------------
Response models built from SQLAlchemy objects use:

    model_config = ConfigDict(from_attributes=True)

Usage:
------
    from bakeflow_bot.schemas.orders import OrderOut, StatusUpdateRequest
"""

from .orders import (
    OrderItemOut,
    OrderOut,
    OrderListResponse,
    StatusUpdateRequest,
    StatusChangeOut,
)
from .chat_orders import (
    ChatOrderItemIn,
    ChatOrderRequest,
    ChatOrderResponse,
)
from .webhook import (
    WebhookEvent,
    WebhookEntry,
    MessagingEvent,
)

__all__ = [
    "OrderItemOut",
    "OrderOut",
    "OrderListResponse",
    "StatusUpdateRequest",
    "StatusChangeOut",
    "WebhookEvent",
    "WebhookEntry",
    "MessagingEvent",
    "ChatOrderItemIn",
    "ChatOrderRequest",
    "ChatOrderResponse",
]
