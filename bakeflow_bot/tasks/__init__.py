"""
Chat Ordering Flow.

This package holds the conversation side of BakeFlow:
- UserState / CartItem / PendingItem models
- Action parsing for button payloads and free text
- PricingEngine for cart totals
- OrderStateMachine with its cart, checkout, quick-order and history handlers

The state machine is imported from its own module to keep this package
importable by the services it depends on.
"""

from .models import CartItem, PendingItem, UserState
from .schemas import ConversationState, StateMachineResult

__all__ = [
    "CartItem",
    "PendingItem",
    "UserState",
    "ConversationState",
    "StateMachineResult",
]
