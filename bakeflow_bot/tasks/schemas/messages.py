"""
Outbound Message Types.

Platform-neutral descriptions of what the bot wants to say. The messenger
client turns these into Send API calls; the state machine never sees the
wire format.
"""

from dataclasses import dataclass, field
from enum import Enum


class MessageKind(str, Enum):
    TEXT = "text"
    QUICK_REPLIES = "quick_replies"
    CAROUSEL = "carousel"


@dataclass(frozen=True)
class QuickReply:
    """A tappable reply chip carrying an action token."""
    title: str
    payload: str


@dataclass(frozen=True)
class CarouselButton:
    title: str
    payload: str


@dataclass(frozen=True)
class CarouselElement:
    """One card of a carousel."""
    title: str
    subtitle: str = ""
    image_url: str | None = None
    buttons: list[CarouselButton] = field(default_factory=list)


@dataclass(frozen=True)
class OutboundMessage:
    """A single message to send to the user."""
    kind: MessageKind
    text: str = ""
    quick_replies: list[QuickReply] = field(default_factory=list)
    elements: list[CarouselElement] = field(default_factory=list)

    @classmethod
    def plain(cls, text: str) -> "OutboundMessage":
        return cls(kind=MessageKind.TEXT, text=text)

    @classmethod
    def with_replies(cls, text: str, replies: list[QuickReply]) -> "OutboundMessage":
        return cls(kind=MessageKind.QUICK_REPLIES, text=text, quick_replies=list(replies))

    @classmethod
    def carousel(cls, elements: list[CarouselElement]) -> "OutboundMessage":
        return cls(kind=MessageKind.CAROUSEL, elements=list(elements))
