"""
Services Package for BakeFlow
=============================

This package contains service modules that encapsulate business logic and
infrastructure concerns around the chat ordering flow.

Available Services:
-------------------
- **state_store**: Per-user locked, in-memory conversation state
- **catalog**: Product lookups (database or static list)
- **business_hours**: Opening hours gate
- **order**: Order submission and order history helpers
- **order_status**: Forward-only fulfillment status workflow
- **notifier**: Background customer notifications for status changes
- **conversation**: Inbound event handling tying the above together

The conversation module is imported on its own (it pulls in the state
machine, which itself uses the order helpers here).

Services receive their collaborators (session factory, messenger, catalog)
in their constructors; the app factory wires them together.

Usage:
------
    from bakeflow_bot.services.order_status import OrderStatusWorkflow
    from bakeflow_bot.services import state_store, order
"""

from . import state_store
from . import catalog
from . import business_hours
from . import order
from . import order_status
from . import notifier

__all__ = [
    "state_store",
    "catalog",
    "business_hours",
    "order",
    "order_status",
    "notifier",
]
