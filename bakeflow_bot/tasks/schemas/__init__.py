"""
State Machine Schemas.

This package contains the data structures used by the state machine for
representing conversation states, outbound messages and results.
"""

from .phases import ConversationState
from .messages import (
    MessageKind,
    QuickReply,
    CarouselButton,
    CarouselElement,
    OutboundMessage,
)
from .result import StateMachineResult

__all__ = [
    # States
    "ConversationState",
    # Outbound messages
    "MessageKind",
    "QuickReply",
    "CarouselButton",
    "CarouselElement",
    "OutboundMessage",
    # Result
    "StateMachineResult",
]
