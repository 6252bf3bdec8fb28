"""
Tests for the Messenger Send API client.
"""

from unittest.mock import MagicMock

import pytest
import requests

from bakeflow_bot.errors import MessengerError
from bakeflow_bot.messenger import MAX_QUICK_REPLIES, MessengerClient
from bakeflow_bot.tasks.schemas import CarouselButton, CarouselElement, OutboundMessage, QuickReply


def _client():
    session = MagicMock()
    response = MagicMock()
    response.json.return_value = {"recipient_id": "u1", "message_id": "mid.1"}
    session.post.return_value = response
    return MessengerClient(page_access_token="page-token", api_version="v18.0", session=session), session


def _sent_body(session):
    return session.post.call_args.kwargs["json"]


def test_mock_mode_without_token():
    session = MagicMock()
    client = MessengerClient(page_access_token="", session=session)

    result = client.send_text("u1", "hello")

    assert result["status"] == "mock"
    session.post.assert_not_called()


def test_send_text():
    client, session = _client()

    result = client.send_text("u1", "hello")

    assert result == {"status": "sent", "recipient_id": "u1", "message_id": "mid.1"}
    assert session.post.call_args.args[0] == "https://graph.facebook.com/v18.0/me/messages"
    assert session.post.call_args.kwargs["params"] == {"access_token": "page-token"}
    body = _sent_body(session)
    assert body["recipient"] == {"id": "u1"}
    assert body["message"] == {"text": "hello"}


def test_quick_replies_are_truncated():
    client, session = _client()
    replies = [QuickReply(title=str(n), payload=f"P_{n}") for n in range(20)]

    client.send_quick_replies("u1", "pick one", replies)

    sent = _sent_body(session)["message"]["quick_replies"]
    assert len(sent) == MAX_QUICK_REPLIES
    assert sent[0] == {"content_type": "text", "title": "0", "payload": "P_0"}


def test_carousel_uses_default_image():
    client, session = _client()
    element = CarouselElement(title="🍫 Chocolate Cake", buttons=[CarouselButton("Order", "ORDER_PRODUCT_1")])

    client.send("u1", OutboundMessage.carousel([element]))

    payload = _sent_body(session)["message"]["attachment"]["payload"]
    assert payload["template_type"] == "generic"
    card = payload["elements"][0]
    assert card["image_url"].startswith("https://")
    assert card["buttons"] == [{"type": "postback", "title": "Order", "payload": "ORDER_PRODUCT_1"}]


def test_send_dispatches_on_kind():
    client, session = _client()

    client.send("u1", OutboundMessage.with_replies("Sure?", [QuickReply("Yes", "CONFIRM_ORDER")]))

    assert _sent_body(session)["message"]["quick_replies"][0]["payload"] == "CONFIRM_ORDER"


def test_transport_error_raises_messenger_error():
    client, session = _client()
    session.post.side_effect = requests.ConnectionError("down")

    with pytest.raises(MessengerError):
        client.send_text("u1", "hello")


def test_http_error_raises_messenger_error():
    client, session = _client()
    session.post.return_value.raise_for_status.side_effect = requests.HTTPError("400")

    with pytest.raises(MessengerError):
        client.send_text("u1", "hello")
