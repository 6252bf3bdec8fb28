"""
Admin Orders Routes for BakeFlow
================================

Endpoints for the bakery dashboard: listing orders, viewing one order and
moving an order along its fulfillment chain.

Endpoints:
----------
- GET /admin/orders: List orders with pagination and status filter
- GET /admin/orders/{id}: Get one order with its items
- PUT /admin/orders/{id}/status: Advance the order status

Status Updates:
---------------
The body is {"status": "<new status>"}. Allowed moves are
pending -> preparing -> ready -> delivered, one step at a time.

- 200: Applied, or the order already had that status (duplicate=true)
- 400: Unknown status, or a skipped / backward step
- 404: No such order

A successful move also notifies the customer in the background; a failed
notification never fails the request.

Usage:
------
    GET /admin/orders?status=preparing&page=1&page_size=20
    PUT /admin/orders/42/status  {"status": "ready"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from ..errors import InvalidStatusError, InvalidTransitionError, OrderNotFoundError
from ..models import Order, ORDER_STATUSES
from ..schemas.orders import (
    OrderOut,
    OrderListResponse,
    StatusUpdateRequest,
    StatusChangeOut,
)


logger = logging.getLogger(__name__)

admin_orders_router = APIRouter(prefix="/admin/orders", tags=["Admin - Orders"])


# =============================================================================
# Order Endpoints
# =============================================================================

@admin_orders_router.get("", response_model=OrderListResponse)
def list_orders(
    db: Session = Depends(get_db),
    status: Optional[str] = Query(
        None,
        description="Filter by status: pending, preparing, ready, delivered, or leave empty for all",
    ),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> OrderListResponse:
    """Return a paginated list of orders, newest first."""
    query = db.query(Order)

    if status:
        if status not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
        query = query.filter(Order.status == status)

    total = query.count()
    offset = (page - 1) * page_size

    orders = (
        query.options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(offset)
        .limit(page_size)
        .all()
    )

    items = [OrderOut.model_validate(o) for o in orders]

    return OrderListResponse(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        has_next=offset + len(items) < total,
    )


@admin_orders_router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)) -> OrderOut:
    order = db.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderOut.model_validate(order)


@admin_orders_router.put("/{order_id}/status", response_model=StatusChangeOut)
def update_order_status(
    order_id: int,
    payload: StatusUpdateRequest,
    request: Request,
) -> StatusChangeOut:
    """
    Advance an order to its next status.

    Re-sending the current status is a successful no-op.
    """
    workflow = request.app.state.status_workflow
    try:
        result = workflow.advance(order_id, payload.status)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "current": e.current, "requested": e.requested},
        )
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StatusChangeOut.model_validate(result)
