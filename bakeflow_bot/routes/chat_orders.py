"""
Chat Order Form Routes for BakeFlow
===================================

The order form opened from a Messenger button posts its whole cart here.
The order is stored exactly like one placed through the conversation and
the customer gets an "Order Confirmed" message in Messenger.

Endpoints:
----------
- POST /chat/orders: Place an order from the form

Responses:
----------
- 200: {"success": true, "order_id": ..., "message": ..., "total_amount": ...}
- 400: Empty cart
- 422: Malformed body (bad quantity, delivery without address)
- 500: The order could not be saved
- 429: Too many requests (rate limited)

The confirmation is sent in the background; a failed send never fails the
request.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ..config import get_rate_limit_chat_orders
from ..errors import EmptyCartError, PersistenceError
from ..schemas.chat_orders import ChatOrderRequest, ChatOrderResponse
from ..tasks.models import UserState
from ..tasks.parsers import DEFAULT_EMOJI
from .webhook import limiter


logger = logging.getLogger(__name__)

chat_orders_router = APIRouter(prefix="/chat/orders", tags=["Chat Orders"])


def _cart_state(body: ChatOrderRequest, catalog) -> UserState:
    """Build the UserState OrderSubmission expects from the form body."""
    state = UserState(
        customer_name=body.display_name(),
        delivery_type=body.delivery_type,
        address=body.address.strip() if body.address else None,
    )
    for item in body.items:
        product = catalog.product_by_id(item.product_id) if item.product_id is not None else None
        if product is None:
            product = catalog.product_by_key(item.name)
        if product is None:
            # Priced at the default unit price
            logger.warning("Order form item %r not in catalog", item.name)
            state.add_to_cart(item.name.strip(), DEFAULT_EMOJI, item.qty)
        else:
            state.add_to_cart(product.name, product.emoji, item.qty)
    return state


@chat_orders_router.post("", response_model=ChatOrderResponse)
@limiter.limit(get_rate_limit_chat_orders)
def create_chat_order(request: Request, body: ChatOrderRequest) -> ChatOrderResponse:
    """Place an order from the Messenger order form."""
    services = request.app.state.services
    logger.info("Order form from %s with %d items", body.user_id, len(body.items))

    state = _cart_state(body, services.catalog)
    try:
        placed = services.submission.place(state, body.user_id)
    except EmptyCartError:
        raise HTTPException(status_code=400, detail="Cart is empty")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to create order")

    services.notifier.confirm_order(
        placed.order_id,
        body.user_id,
        [(item.product, item.quantity) for item in state.cart],
        placed.totals.total,
    )

    return ChatOrderResponse(
        success=True,
        order_id=placed.order_id,
        message="Order placed successfully!",
        total_amount=placed.totals.total,
    )
