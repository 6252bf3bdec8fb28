"""
Messenger Webhook Routes for BakeFlow
=====================================

Endpoints:
----------
- GET /webhook: Verification handshake. Messenger sends hub.mode,
  hub.verify_token and hub.challenge; the challenge is echoed back when the
  token matches.
- POST /webhook: Inbound events. Each messaging event becomes one call to
  ConversationService.handle_inbound_event.

Event Mapping:
--------------
- Quick reply: the quick reply payload is the token (its text is ignored).
- Postback (carousel button, Get Started): the postback payload is the token.
- Plain message: the text is passed through as free text.
- Echoes of our own messages are skipped.

The POST endpoint always answers 200 once the body parses, so the platform
does not retry events the bot has already acted on.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_webhook
from ..errors import BakeFlowError
from ..schemas.webhook import WebhookEvent


logger = logging.getLogger(__name__)

webhook_router = APIRouter(prefix="/webhook", tags=["Webhook"])

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


@webhook_router.get("", response_class=PlainTextResponse)
def verify_webhook(
    request: Request,
    mode: str = Query("", alias="hub.mode"),
    token: str = Query("", alias="hub.verify_token"),
    challenge: str = Query("", alias="hub.challenge"),
) -> str:
    """Echo the challenge if the verify token matches."""
    if mode == "subscribe" and token and token == request.app.state.verify_token:
        logger.info("Webhook verified")
        return challenge
    logger.warning("Webhook verification failed (mode=%s)", mode)
    raise HTTPException(status_code=403, detail="Verification failed")


@webhook_router.post("")
@limiter.limit(get_rate_limit_webhook)
def receive_webhook(request: Request, event: WebhookEvent) -> dict:
    """Route every messaging event of the payload to the conversation service."""
    service = request.app.state.conversation_service
    handled = 0

    for entry in event.entry:
        for messaging in entry.messaging:
            if messaging.message is not None and messaging.message.is_echo:
                continue

            user_id = messaging.sender.id
            payload = messaging.payload()
            text = None if payload is not None else messaging.text()
            if payload is None and text is None:
                logger.debug("Skipping event without payload or text from %s", user_id)
                continue

            try:
                service.handle_inbound_event(user_id, payload=payload, text=text)
            except BakeFlowError as e:
                logger.error("Failed to handle event from %s: %s", user_id, e)
                continue
            handled += 1

    return {"status": "ok", "handled": handled}
