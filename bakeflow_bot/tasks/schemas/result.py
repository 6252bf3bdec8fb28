"""
State Machine Result.

Defines the result structure returned by state machine processing.
"""

from dataclasses import dataclass, field

from .messages import OutboundMessage


@dataclass
class StateMachineResult:
    """Result from state machine processing."""
    messages: list[OutboundMessage] = field(default_factory=list)
    # The caller drops the user's state entirely (cancel, completion, fail-safe reset)
    discard_state: bool = False
    # Set when an order was persisted while handling the event
    order_id: int | None = None

    def extend(self, other: "StateMachineResult") -> "StateMachineResult":
        self.messages.extend(other.messages)
        self.discard_state = self.discard_state or other.discard_state
        if other.order_id is not None:
            self.order_id = other.order_id
        return self
