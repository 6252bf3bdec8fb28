"""
Routes Package for BakeFlow
===========================

API route definitions, one APIRouter per module.

- webhook.py: Messenger webhook (verification handshake and inbound events)
- admin_orders.py: Order listing and status updates for the bakery dashboard
- chat_orders.py: Orders placed from the Messenger order form

Router Registration:
--------------------
All routers are registered by app_factory.create_app under two prefixes:
1. /api/v1/* - Versioned API (recommended)
2. /* - Root paths (Messenger is configured with /webhook)

Route Dependencies:
-------------------
- get_db: Database session for queries
- limiter.limit(): Rate limiting on the webhook and the order form
- request.app.state: services, conversation_service and status_workflow

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 400: Invalid status or status transition, empty order form cart
- 403: Webhook verification failed
- 404: Order not found
- 429: Too many requests (rate limited)
- 500: Order form cart could not be saved
"""

from .webhook import webhook_router, limiter
from .admin_orders import admin_orders_router
from .chat_orders import chat_orders_router

__all__ = [
    "webhook_router",
    "admin_orders_router",
    "chat_orders_router",
    "limiter",
]
