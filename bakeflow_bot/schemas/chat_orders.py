"""
Chat Order Schemas for BakeFlow
===============================

Pydantic models for POST /chat/orders, the order form opened from inside
Messenger. The form posts the whole cart at once instead of walking the
conversation step by step.

Prices sent by the form are informational only; the order is priced from
the catalog, the same way chat orders are.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class ChatOrderItemIn(BaseModel):
    """One cart line from the order form."""
    product_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    qty: int = Field(..., ge=1)
    price: Optional[float] = None


class ChatOrderRequest(BaseModel):
    """Body of POST /chat/orders."""
    user_id: str = Field(..., min_length=1, description="Messenger sender id")
    items: List[ChatOrderItemIn] = []
    channel: Optional[str] = None
    notes: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    delivery_type: Literal["pickup", "delivery"] = "pickup"
    address: Optional[str] = None

    @model_validator(mode="after")
    def address_required_for_delivery(self) -> "ChatOrderRequest":
        if self.delivery_type == "delivery" and not (self.address and self.address.strip()):
            raise ValueError("address is required for delivery")
        return self

    def display_name(self) -> Optional[str]:
        """Customer name with the phone number appended, as shown to staff."""
        name = (self.customer_name or "").strip()
        phone = (self.customer_phone or "").strip()
        if phone:
            return f"{name} ({phone})" if name else phone
        return name or None


class ChatOrderResponse(BaseModel):
    """Result of placing an order from the form."""
    success: bool
    order_id: int
    message: str
    total_amount: float
