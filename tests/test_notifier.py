"""
Tests for background order status notifications.
"""

import pytest

from bakeflow_bot.services.notifier import OrderNotifier, build_confirmation_message, build_status_message
from conftest import FakeMessenger


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def notifier(messenger):
    n = OrderNotifier(messenger, max_workers=2)
    yield n
    n.shutdown(wait=True)


def test_build_status_message():
    assert build_status_message(7, "preparing").startswith("🍰 Great news!")
    assert "#7" in build_status_message(7, "ready")
    assert build_status_message(7, "lost") is None


def test_status_message_is_sent(notifier, messenger):
    assert notifier.dispatch(12, "user-1", "preparing").result(timeout=5) is True
    assert messenger.texts == [("user-1", build_status_message(12, "preparing"))]
    assert messenger.quick_replies == []


def test_delivered_asks_for_rating(notifier, messenger):
    assert notifier.dispatch(12, "user-1", "delivered").result(timeout=5) is True

    assert "delivered" in messenger.texts[0][1]
    user_id, text, replies = messenger.quick_replies[0]
    assert user_id == "user-1"
    assert "#12" in text
    assert [r.payload for r in replies] == ["RATE_ORDER_12", "SKIP_RATING"]


def test_send_failure_resolves_false(notifier, messenger):
    messenger.fail = True
    assert notifier.dispatch(12, "user-1", "ready").result(timeout=5) is False


def test_unknown_status_resolves_false(notifier, messenger):
    assert notifier.dispatch(12, "user-1", "lost").result(timeout=5) is False
    assert messenger.texts == []


def test_confirmation_lists_first_lines():
    lines = [("Croissant", 2), ("Coffee", 1), ("Bread", 1), ("Cinnamon Roll", 4)]
    text = build_confirmation_message(31, lines, 29.0)

    assert text.startswith("🎉 Order Confirmed!")
    assert "Order #31" in text
    assert "Bread × 1" in text
    assert "Cinnamon Roll" not in text
    assert "...and more" in text
    assert "Total: $29.00" in text


def test_confirm_order(notifier, messenger):
    assert notifier.confirm_order(31, "user-1", [("Coffee", 2)], 10.0).result(timeout=5) is True
    assert messenger.texts == [("user-1", build_confirmation_message(31, [("Coffee", 2)], 10.0))]


def test_confirm_order_failure_resolves_false(notifier, messenger):
    messenger.fail = True
    assert notifier.confirm_order(31, "user-1", [("Coffee", 2)], 10.0).result(timeout=5) is False
