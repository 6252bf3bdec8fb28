"""
Exceptions raised by the ordering core.

Routes translate these into HTTP responses; the conversation state machine
recovers from UserInputError locally with a corrective prompt.
"""

from typing import Optional


class BakeFlowError(Exception):
    """Base class for all BakeFlow errors."""


class UserInputError(BakeFlowError):
    """Input that does not fit the user's current step."""


class EmptyCartError(UserInputError):
    """Raised when an order is submitted with nothing in the cart."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__("Cannot submit an order with an empty cart")


class OrderNotFoundError(BakeFlowError):
    """Raised when an operation references an order that does not exist."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order #{order_id} not found")


class InvalidStatusError(BakeFlowError):
    """Raised when a requested status is not part of the fulfillment chain."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid status: {status}")


class InvalidTransitionError(BakeFlowError):
    """Raised when a requested status is not the next step for an order."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid transition: {current} -> {requested}")


class PersistenceError(BakeFlowError):
    """Raised when an order could not be written to the database."""


class MessengerError(BakeFlowError):
    """Raised when the messaging platform rejects or fails a send."""
