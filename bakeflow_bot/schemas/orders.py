"""
Order Schemas for BakeFlow
==========================

Pydantic models for the admin order endpoints.

Endpoint Coverage:
------------------
- GET /admin/orders: List orders with pagination and filtering
- GET /admin/orders/{id}: Get one order with its items
- PUT /admin/orders/{id}/status: Advance the fulfillment status

Order Lifecycle:
----------------
pending -> preparing -> ready -> delivered

Each step can only move to the next one. Sending the current status again is
accepted as a no-op and reported with duplicate=True.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderItemOut(BaseModel):
    """One line of an order. `price` is the unit price at order time."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product: str
    quantity: int
    price: float


class OrderOut(BaseModel):
    """Order as shown on the admin dashboard."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    delivery_type: str
    address: Optional[str] = None
    status: str
    total_items: int
    subtotal: float
    delivery_fee: float
    total_amount: float
    reordered_from: Optional[int] = None
    rating_id: Optional[int] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    items: List[OrderItemOut] = []


class OrderListResponse(BaseModel):
    """Paginated list of orders."""
    items: List[OrderOut]
    page: int
    page_size: int
    total: int
    has_next: bool


class StatusUpdateRequest(BaseModel):
    """Body of PUT /admin/orders/{id}/status."""
    status: str = Field(..., min_length=1, description="pending, preparing, ready or delivered")


class StatusChangeOut(BaseModel):
    """Outcome of a status update."""
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    applied: bool
    duplicate: bool
    previous_status: str
    current_status: str
    message: str
    notification_dispatched: bool = False
