"""
Order Status Workflow for BakeFlow
==================================

Forward-only fulfillment status for persisted orders:

    pending -> preparing -> ready -> delivered

`delivered` is terminal. An order never skips a stage and never goes back.

advance(order_id, requested_status) checks, in order:
-------------------------------------------------------
1. The requested value is one of the four statuses (InvalidStatusError).
2. The order exists (OrderNotFoundError).
3. Already delivered and asked for delivered again: "Order already
   delivered", no write.
4. Requested equals current: "Status unchanged", no write. Duplicate
   operator clicks land here.
5. Requested is the single allowed next status, else
   InvalidTransitionError(current, requested).
6. Conditional UPDATE ... WHERE status = current. If another writer moved the
   order first, the order is re-read and checks 3-5 run again.
7. After commit, a best-effort notification goes to the order's sender on
   the notifier's background pool. Failures are logged by the notifier and
   never reach the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..errors import InvalidStatusError, InvalidTransitionError, OrderNotFoundError
from ..models import Order, ORDER_STATUSES


logger = logging.getLogger(__name__)


# Single allowed next status for each status; delivered has none
ALLOWED_NEXT = {
    "pending": "preparing",
    "preparing": "ready",
    "ready": "delivered",
}


@dataclass(frozen=True)
class StatusChangeResult:
    order_id: int
    applied: bool
    duplicate: bool
    previous_status: str
    current_status: str
    message: str
    notification_dispatched: bool = False


class OrderStatusWorkflow:
    """Validates and applies status transitions on persisted orders."""

    def __init__(self, session_factory: Callable[[], Session], notifier=None):
        """
        Args:
            session_factory: Returns a new SQLAlchemy Session.
            notifier: OrderNotifier (or None to skip notifications).
        """
        self._session_factory = session_factory
        self._notifier = notifier

    def advance(self, order_id: int, requested_status: str) -> StatusChangeResult:
        requested = (requested_status or "").strip().lower()
        if requested not in ORDER_STATUSES:
            raise InvalidStatusError(requested_status)

        db = self._session_factory()
        try:
            order = db.get(Order, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            while True:
                current = order.status
                result = self._check(order_id, current, requested)
                if result is not None:
                    return result

                values = {"status": requested}
                if requested == "delivered":
                    values["completed_at"] = datetime.now(timezone.utc)

                updated = (
                    db.query(Order)
                    .filter(Order.id == order_id, Order.status == current)
                    .update(values, synchronize_session=False)
                )
                db.commit()

                if updated:
                    sender_id = order.sender_id
                    break

                # Lost the race; look at what the other writer left behind
                logger.info("Order #%s changed concurrently from %s, re-checking", order_id, current)
                db.expire_all()
                order = db.get(Order, order_id)
                if order is None:
                    raise OrderNotFoundError(order_id)
        finally:
            db.close()

        logger.info("Order #%s status %s -> %s", order_id, current, requested)
        dispatched = self._dispatch_notification(order_id, sender_id, requested)
        return StatusChangeResult(
            order_id=order_id,
            applied=True,
            duplicate=False,
            previous_status=current,
            current_status=requested,
            message=f"Order status updated to {requested}",
            notification_dispatched=dispatched,
        )

    def _check(self, order_id: int, current: str, requested: str) -> Optional[StatusChangeResult]:
        """Return an idempotent result, raise on an invalid move, or None to proceed."""
        if current == requested:
            message = "Order already delivered" if current == "delivered" else "Status unchanged"
            logger.info("Order #%s: %s (%s)", order_id, message, current)
            return StatusChangeResult(
                order_id=order_id,
                applied=False,
                duplicate=True,
                previous_status=current,
                current_status=current,
                message=message,
            )

        if ALLOWED_NEXT.get(current) != requested:
            logger.warning("Rejected transition for order #%s: %s -> %s", order_id, current, requested)
            raise InvalidTransitionError(current, requested)

        return None

    def _dispatch_notification(self, order_id: int, sender_id: Optional[str], status: str) -> bool:
        if not sender_id or self._notifier is None:
            return False
        try:
            self._notifier.dispatch(order_id, sender_id, status)
            return True
        except RuntimeError as e:
            # Executor already shut down
            logger.error("Could not schedule notification for order #%s: %s", order_id, e)
            return False
