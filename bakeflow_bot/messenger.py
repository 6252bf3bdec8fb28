"""
Messenger Send API client for outbound chat messages.

Sends real messages through the Graph API when a page token is configured,
falls back to logging in mock mode.

Environment variables (see config.py):
- PAGE_ACCESS_TOKEN: Page token; unset means mock mode
- GRAPH_API_VERSION: Graph API version (e.g., v18.0)
- MESSENGER_TIMEOUT: Request timeout in seconds
"""

import logging
from typing import List, Optional

import requests

from .config import PAGE_ACCESS_TOKEN, GRAPH_API_VERSION, MESSENGER_TIMEOUT
from .errors import MessengerError
from .tasks.schemas import (
    CarouselElement,
    MessageKind,
    OutboundMessage,
    QuickReply,
)

logger = logging.getLogger(__name__)

# Messenger caps
MAX_QUICK_REPLIES = 13
MAX_CAROUSEL_ELEMENTS = 10

DEFAULT_IMAGE_URL = "https://images.unsplash.com/photo-1578985545062-69928b1d9587?w=300&h=200&fit=crop"


class MessengerClient:
    """
    Thin client over the Send API.

    Every public send method raises MessengerError if the platform rejects
    the request or cannot be reached. In mock mode nothing is sent and the
    message is logged instead.
    """

    def __init__(
        self,
        page_access_token: Optional[str] = PAGE_ACCESS_TOKEN,
        api_version: str = GRAPH_API_VERSION,
        timeout: int = MESSENGER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.page_access_token = page_access_token
        self.api_url = f"https://graph.facebook.com/{api_version}/me/messages"
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.page_access_token)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def send_text(self, user_id: str, text: str) -> dict:
        return self._post(user_id, {"text": text})

    def send_quick_replies(self, user_id: str, text: str, replies: List[QuickReply]) -> dict:
        if len(replies) > MAX_QUICK_REPLIES:
            logger.warning("Truncating %d quick replies to %d", len(replies), MAX_QUICK_REPLIES)
        message = {
            "text": text,
            "quick_replies": [
                {"content_type": "text", "title": reply.title, "payload": reply.payload}
                for reply in replies[:MAX_QUICK_REPLIES]
            ],
        }
        return self._post(user_id, message)

    def send_carousel(self, user_id: str, elements: List[CarouselElement]) -> dict:
        payload_elements = [
            {
                "title": element.title,
                "subtitle": element.subtitle,
                "image_url": element.image_url or DEFAULT_IMAGE_URL,
                "buttons": [
                    {"type": "postback", "title": button.title, "payload": button.payload}
                    for button in element.buttons
                ],
            }
            for element in elements[:MAX_CAROUSEL_ELEMENTS]
        ]
        message = {
            "attachment": {
                "type": "template",
                "payload": {"template_type": "generic", "elements": payload_elements},
            }
        }
        return self._post(user_id, message)

    def send(self, user_id: str, message: OutboundMessage) -> dict:
        """Send one platform-neutral message."""
        if message.kind == MessageKind.QUICK_REPLIES:
            return self.send_quick_replies(user_id, message.text, message.quick_replies)
        if message.kind == MessageKind.CAROUSEL:
            return self.send_carousel(user_id, message.elements)
        return self.send_text(user_id, message.text)

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _post(self, user_id: str, message: dict) -> dict:
        body = {
            "recipient": {"id": user_id},
            "messaging_type": "RESPONSE",
            "message": message,
        }

        if not self.is_configured:
            logger.info("[MOCK MESSENGER] To: %s", user_id)
            logger.info("[MOCK MESSENGER] Message: %s", message)
            return {"status": "mock", "recipient_id": user_id}

        try:
            response = self._session.post(
                self.api_url,
                params={"access_token": self.page_access_token},
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("Send API call to %s failed: %s", user_id, e)
            raise MessengerError(f"Failed to send message to {user_id}: {e}") from e

        logger.debug("Message delivered to %s: %s", user_id, data.get("message_id"))
        return {"status": "sent", "recipient_id": user_id, "message_id": data.get("message_id")}
