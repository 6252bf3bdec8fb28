"""
Conversation Service for BakeFlow
=================================

Entry point for inbound chat events. Ties together the user state store,
the ordering state machine, order submission and outbound messaging.

Per event:
1. Take the user's lock (store.locked) and load or create their state.
2. Run the state machine, which mutates the state in place.
3. Drop the state if the result says so (cancel, completion, reset).
4. Release the lock, then send the outbound messages.

Sending happens outside the lock so a slow messaging platform never blocks
the user's next event. Send failures are logged and stop the remaining
messages of that event; they never undo the state change.
"""

import logging
from typing import Optional

from ..errors import MessengerError
from ..tasks.schemas import StateMachineResult
from ..tasks.state_machine import OrderStateMachine
from .order import OrderSubmission
from .state_store import UserStateStore


logger = logging.getLogger(__name__)


class ConversationService:
    """Handles inbound events and order submission for chat users."""

    def __init__(
        self,
        store: UserStateStore,
        state_machine: OrderStateMachine,
        submission: OrderSubmission,
        messenger,
    ):
        self.store = store
        self.state_machine = state_machine
        self.submission = submission
        self.messenger = messenger

    def handle_inbound_event(
        self,
        user_id: str,
        payload: Optional[str] = None,
        text: Optional[str] = None,
    ) -> StateMachineResult:
        """
        Process one inbound event: a button payload, or free text.

        A payload wins when both are present (quick replies carry both).
        """
        if payload is None and not (text and text.strip()):
            logger.debug("Ignoring empty event from %s", user_id)
            return StateMachineResult()

        with self.store.locked(user_id) as state:
            if payload is not None:
                result = self.state_machine.handle_payload(user_id, state, payload)
            else:
                result = self.state_machine.handle_text(user_id, state, text)

            if result.discard_state:
                self.store.discard(user_id)

        self.deliver(user_id, result)
        return result

    def submit_order(self, user_id: str) -> int:
        """
        Submit the user's current cart as an order and clear their state.

        Raises:
            EmptyCartError: Nothing in the cart; nothing is written.
            PersistenceError: The write failed; the state is kept.
        """
        with self.store.locked(user_id) as state:
            order_id = self.submission.submit(state, user_id)
            self.store.discard(user_id)
        return order_id

    def deliver(self, user_id: str, result: StateMachineResult) -> int:
        """Send a result's messages in order. Returns how many were sent."""
        sent = 0
        for message in result.messages:
            try:
                self.messenger.send(user_id, message)
            except MessengerError as e:
                logger.error("Delivery to %s stopped after %d messages: %s", user_id, sent, e)
                break
            sent += 1
        return sent
