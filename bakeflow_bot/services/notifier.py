"""
Order status notifications.

Best-effort customer messages sent after an order changes status. Sending
runs on a small thread pool so the operator's request never waits on the
messaging platform, and every failure inside a task is caught and logged.
A failed notification never affects the status change that triggered it.

Orders placed from the Messenger order form get an "Order Confirmed"
message through the same pool (confirm_order).
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Tuple

from ..config import NOTIFIER_MAX_WORKERS
from ..tasks.schemas import QuickReply

logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "pending": "✅ Your order #{order_id} has been received! We'll start preparing it soon.",
    "preparing": "🍰 Great news! We've started preparing your order #{order_id}. It will be ready soon!",
    "ready": "✅ Your order #{order_id} is ready! Please come pick it up or wait for delivery.",
    "delivered": "🎉 Your order #{order_id} has been delivered! Enjoy your delicious treats!",
}

# Sent after the delivered message so the customer can rate the order
RATING_PROMPT = "⭐ How was your order #{order_id}? Tap below to rate it."


def build_status_message(order_id: int, status: str) -> Optional[str]:
    template = STATUS_MESSAGES.get(status)
    return template.format(order_id=order_id) if template else None


# Lines listed in an order confirmation before "...and more"
CONFIRMATION_MAX_LINES = 3


def build_confirmation_message(order_id: int, lines: List[Tuple[str, int]], total: float) -> str:
    """Text of the "Order Confirmed" message for orders placed outside the chat flow."""
    listed = [f"{product} × {quantity}" for product, quantity in lines[:CONFIRMATION_MAX_LINES]]
    if len(lines) > CONFIRMATION_MAX_LINES:
        listed.append("...and more")
    return (
        f"🎉 Order Confirmed!\n\nOrder #{order_id}\n"
        + "\n".join(listed)
        + f"\n\nTotal: ${total:.2f}\nStatus: ⏳ Pending\n\n"
        "We'll start preparing your order soon!"
    )


class OrderNotifier:
    """Dispatches status notifications on a bounded background pool."""

    def __init__(self, messenger, max_workers: int = NOTIFIER_MAX_WORKERS):
        """
        Args:
            messenger: Object with send_text / send_quick_replies (MessengerClient).
            max_workers: Pool size.
        """
        self.messenger = messenger
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="order-notifier")

    def dispatch(self, order_id: int, sender_id: str, status: str) -> Future:
        """
        Schedule a notification and return immediately.

        The returned future always resolves to True (sent) or False (failed);
        it never raises.
        """
        return self._executor.submit(self._notify, order_id, sender_id, status)

    def _notify(self, order_id: int, sender_id: str, status: str) -> bool:
        try:
            text = build_status_message(order_id, status)
            if text is None:
                logger.warning("No notification template for status %s (order %s)", status, order_id)
                return False

            if status == "delivered":
                self.messenger.send_text(sender_id, text)
                self.messenger.send_quick_replies(
                    sender_id,
                    RATING_PROMPT.format(order_id=order_id),
                    [
                        QuickReply(title="⭐ Rate order", payload=f"RATE_ORDER_{order_id}"),
                        QuickReply(title="Skip", payload="SKIP_RATING"),
                    ],
                )
            else:
                self.messenger.send_text(sender_id, text)

            logger.info("Notified %s about order #%s -> %s", sender_id, order_id, status)
            return True
        except Exception as e:
            logger.error("Failed to notify %s about order #%s -> %s: %s", sender_id, order_id, status, e)
            return False

    def confirm_order(self, order_id: int, sender_id: str, lines: List[Tuple[str, int]], total: float) -> Future:
        """Schedule an order confirmation. Resolves to True or False like dispatch()."""
        return self._executor.submit(self._confirm, order_id, sender_id, list(lines), total)

    def _confirm(self, order_id: int, sender_id: str, lines: List[Tuple[str, int]], total: float) -> bool:
        try:
            self.messenger.send_text(sender_id, build_confirmation_message(order_id, lines, total))
            logger.info("Sent confirmation for order #%s to %s", order_id, sender_id)
            return True
        except Exception as e:
            logger.error("Failed to confirm order #%s to %s: %s", order_id, sender_id, e)
            return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
