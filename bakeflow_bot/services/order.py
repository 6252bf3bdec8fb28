"""
Order Persistence Service for BakeFlow
======================================

This module writes orders to the database and reads back what the chat
flow needs about past orders (history, reorder, rating).

Key Pieces:
-----------
- OrderSubmission.submit: Persist a confirmed cart as an Order + OrderItems
- OrderSubmission.place: Same, returning the stored totals (web orders)
- recent_orders_for_sender: Latest orders of one chat user
- get_order_for_sender: Load one order, only if it belongs to that user
- save_rating: Store a 1-5 star rating, at most one per order

Atomicity:
----------
The order row and all of its item rows are written in one transaction. If
any insert fails the whole transaction is rolled back and PersistenceError
is raised; the caller keeps the user's cart so nothing is lost.

An empty cart is rejected with EmptyCartError before a session is opened.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..config import PICKUP_ADDRESS_LABEL
from ..errors import EmptyCartError, PersistenceError
from ..models import Order, OrderItem, Rating
from ..tasks.models import UserState
from ..tasks.pricing import OrderTotals, PricingEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedOrder:
    order_id: int
    totals: OrderTotals


class OrderSubmission:
    """Turns a finished conversation into a persisted order."""

    def __init__(self, session_factory: Callable[[], Session], pricing: PricingEngine):
        self._session_factory = session_factory
        self._pricing = pricing

    def submit(self, user_state: UserState, sender_id: str) -> int:
        """
        Persist the user's cart and collected fields as a pending order.

        Args:
            user_state: Conversation state with a non-empty cart.
            sender_id: Chat user id, stored for status notifications.

        Returns:
            int: The new order id.

        Raises:
            EmptyCartError: The cart is empty. Nothing is written.
            PersistenceError: The write failed and was rolled back.
        """
        return self.place(user_state, sender_id).order_id

    def place(self, user_state: UserState, sender_id: str) -> PlacedOrder:
        """
        Same as submit(), also returning the totals that were stored.

        Raises:
            EmptyCartError: The cart is empty. Nothing is written.
            PersistenceError: The write failed and was rolled back.
        """
        if not user_state.cart:
            raise EmptyCartError(sender_id)

        delivery_type = user_state.delivery_type or "pickup"
        address = user_state.address
        if delivery_type == "pickup":
            address = PICKUP_ADDRESS_LABEL

        # Prices are resolved before the write session opens; catalog lookups
        # use sessions of their own.
        totals = self._pricing.calculate_order_totals(user_state.cart, delivery_type, address)

        db = self._session_factory()
        try:
            order = Order(
                customer_name=user_state.customer_name or "Guest",
                delivery_type=delivery_type,
                address=address,
                status="pending",
                total_items=totals.total_items,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                total_amount=totals.total,
                reordered_from=user_state.reordered_from,
                sender_id=sender_id,
            )
            db.add(order)
            db.flush()  # assigns order.id

            for item, unit_price in zip(user_state.cart, totals.unit_prices):
                db.add(OrderItem(
                    order_id=order.id,
                    product=item.product,
                    quantity=item.quantity,
                    price=unit_price,
                ))

            db.commit()
            order_id = order.id
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to persist order for %s: %s", sender_id, e)
            raise PersistenceError(f"Could not save order: {e}") from e
        finally:
            db.close()

        logger.info(
            "Order #%s created for %s: %d items, total %.2f",
            order_id, sender_id, totals.total_items, totals.total,
        )
        return PlacedOrder(order_id=order_id, totals=totals)


# =============================================================================
# Order history helpers
# =============================================================================

def recent_orders_for_sender(db: Session, sender_id: str, limit: int = 5) -> List[Order]:
    """Most recent orders of one chat user, newest first."""
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.sender_id == sender_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )


def get_order_for_sender(db: Session, order_id: int, sender_id: str) -> Optional[Order]:
    """Load an order only if it belongs to sender_id."""
    order = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id)
        .first()
    )
    if order is None or order.sender_id != sender_id:
        return None
    return order


def save_rating(
    db: Session,
    order: Order,
    user_id: str,
    stars: int,
    comment: Optional[str] = None,
) -> Optional[Rating]:
    """
    Store a rating for an order and link it from the order.

    Returns None if the order already has a rating.
    """
    if order.rating_id is not None:
        return None

    rating = Rating(order_id=order.id, user_id=user_id, stars=stars, comment=comment)
    try:
        db.add(rating)
        db.flush()
        order.rating_id = rating.id
        db.commit()
    except IntegrityError:
        # Unique order_id: a concurrent rating won
        db.rollback()
        return None
    logger.info("Order #%s rated %d stars by %s", order.id, stars, user_id)
    return rating
