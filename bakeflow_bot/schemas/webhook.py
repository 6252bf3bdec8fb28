"""
Webhook Schemas for BakeFlow.

Only the parts of the Messenger webhook payload the bot reads are modelled;
everything else is ignored.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Sender(_Lenient):
    id: str


class QuickReplyPayload(_Lenient):
    payload: str


class Message(_Lenient):
    text: Optional[str] = None
    quick_reply: Optional[QuickReplyPayload] = None
    is_echo: bool = False


class Postback(_Lenient):
    payload: Optional[str] = None
    title: Optional[str] = None


class MessagingEvent(_Lenient):
    sender: Sender
    message: Optional[Message] = None
    postback: Optional[Postback] = None

    def payload(self) -> Optional[str]:
        """Button token: a quick reply payload or a postback payload."""
        if self.message is not None and self.message.quick_reply is not None:
            return self.message.quick_reply.payload
        if self.postback is not None:
            return self.postback.payload
        return None

    def text(self) -> Optional[str]:
        if self.message is not None:
            return self.message.text
        return None


class WebhookEntry(_Lenient):
    id: Optional[str] = None
    messaging: List[MessagingEvent] = Field(default_factory=list)


class WebhookEvent(_Lenient):
    object: str = ""
    entry: List[WebhookEntry] = Field(default_factory=list)
