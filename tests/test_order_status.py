"""
Tests for the forward-only order status workflow.

Run with: pytest tests/test_order_status.py -v
"""

import pytest

from bakeflow_bot.errors import InvalidStatusError, InvalidTransitionError, OrderNotFoundError
from bakeflow_bot.models import Order
from bakeflow_bot.services.order_status import OrderStatusWorkflow


class RecordingNotifier:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def dispatch(self, order_id, sender_id, status):
        if self.error is not None:
            raise self.error
        self.calls.append((order_id, sender_id, status))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def workflow(session_factory, notifier):
    return OrderStatusWorkflow(session_factory, notifier)


def _status(session_factory, order_id):
    db = session_factory()
    try:
        return db.get(Order, order_id).status
    finally:
        db.close()


class TestForwardChain:

    def test_full_chain(self, workflow, make_order, session_factory, notifier):
        order_id = make_order()

        for previous, requested in (("pending", "preparing"), ("preparing", "ready"), ("ready", "delivered")):
            result = workflow.advance(order_id, requested)
            assert result.applied is True
            assert result.duplicate is False
            assert result.previous_status == previous
            assert result.current_status == requested
            assert result.message == f"Order status updated to {requested}"
            assert result.notification_dispatched is True

        assert _status(session_factory, order_id) == "delivered"
        assert [c[2] for c in notifier.calls] == ["preparing", "ready", "delivered"]
        assert all(c[1] == "user-1" for c in notifier.calls)

    def test_delivered_sets_completed_at(self, workflow, make_order, session_factory):
        order_id = make_order(status="ready")

        workflow.advance(order_id, "delivered")

        db = session_factory()
        try:
            assert db.get(Order, order_id).completed_at is not None
        finally:
            db.close()

    def test_status_is_case_insensitive(self, workflow, make_order):
        order_id = make_order()
        assert workflow.advance(order_id, " PREPARING ").current_status == "preparing"


class TestIdempotency:

    def test_same_status_is_noop(self, workflow, make_order, notifier):
        order_id = make_order(status="preparing")

        result = workflow.advance(order_id, "preparing")

        assert result.applied is False
        assert result.duplicate is True
        assert result.message == "Status unchanged"
        assert result.notification_dispatched is False
        assert notifier.calls == []

    def test_delivered_again(self, workflow, make_order, notifier):
        order_id = make_order(status="delivered")

        result = workflow.advance(order_id, "delivered")

        assert result.duplicate is True
        assert result.message == "Order already delivered"
        assert notifier.calls == []


class TestRejectedTransitions:

    @pytest.mark.parametrize("current,requested", [
        ("pending", "ready"),
        ("pending", "delivered"),
        ("preparing", "delivered"),
        ("ready", "preparing"),
        ("delivered", "pending"),
        ("preparing", "pending"),
    ])
    def test_skip_or_regression(self, workflow, make_order, session_factory, notifier, current, requested):
        order_id = make_order(status=current)

        with pytest.raises(InvalidTransitionError) as exc_info:
            workflow.advance(order_id, requested)

        assert exc_info.value.current == current
        assert exc_info.value.requested == requested
        assert _status(session_factory, order_id) == current
        assert notifier.calls == []

    @pytest.mark.parametrize("requested", ["shipped", "", "cancelled"])
    def test_unknown_status(self, workflow, make_order, requested):
        order_id = make_order()
        with pytest.raises(InvalidStatusError):
            workflow.advance(order_id, requested)

    def test_missing_order(self, workflow):
        with pytest.raises(OrderNotFoundError):
            workflow.advance(424242, "preparing")


class TestNotificationIsBestEffort:

    def test_no_sender_no_notification(self, workflow, make_order, notifier):
        order_id = make_order(sender_id=None)

        result = workflow.advance(order_id, "preparing")

        assert result.applied is True
        assert result.notification_dispatched is False
        assert notifier.calls == []

    def test_scheduling_failure_keeps_status(self, session_factory, make_order):
        workflow = OrderStatusWorkflow(session_factory, RecordingNotifier(error=RuntimeError("shut down")))
        order_id = make_order()

        result = workflow.advance(order_id, "preparing")

        assert result.applied is True
        assert result.notification_dispatched is False
        assert _status(session_factory, order_id) == "preparing"

    def test_without_notifier(self, session_factory, make_order):
        workflow = OrderStatusWorkflow(session_factory)
        order_id = make_order()
        assert workflow.advance(order_id, "preparing").notification_dispatched is False
