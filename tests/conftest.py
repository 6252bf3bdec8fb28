import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bakeflow_bot.db as db
from bakeflow_bot.app_factory import build_services, create_app
from bakeflow_bot.errors import MessengerError
from bakeflow_bot.models import Base, Order, OrderItem
from bakeflow_bot.routes import limiter
from bakeflow_bot.seed_catalog import seed_catalog
from bakeflow_bot.services.state_store import UserStateStore
from bakeflow_bot.tasks.schemas import MessageKind

TEST_VERIFY_TOKEN = "test-verify-token"


class FakeMessenger:
    """Records everything the bot sends instead of calling the Send API."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []  # (user_id, OutboundMessage)
        self.texts = []  # (user_id, text) from send_text
        self.quick_replies = []  # (user_id, text, replies)

    def send(self, user_id, message):
        if self.fail:
            raise MessengerError("send failed")
        self.sent.append((user_id, message))
        return {"status": "fake"}

    def send_text(self, user_id, text):
        if self.fail:
            raise MessengerError("send failed")
        self.texts.append((user_id, text))
        return {"status": "fake"}

    def send_quick_replies(self, user_id, text, replies):
        if self.fail:
            raise MessengerError("send failed")
        self.quick_replies.append((user_id, text, list(replies)))
        return {"status": "fake"}

    def messages_for(self, user_id):
        return [m for uid, m in self.sent if uid == user_id]

    def text_for(self, user_id):
        """All text sent to a user, carousels included as their card titles."""
        parts = []
        for message in self.messages_for(user_id):
            if message.kind == MessageKind.CAROUSEL:
                parts.extend(e.title for e in message.elements)
            else:
                parts.append(message.text)
        return "\n".join(parts)

    def clear(self):
        self.sent.clear()
        self.texts.clear()
        self.quick_replies.clear()


class FixedBusinessHours:
    """Business hours gate with a fixed answer."""

    def __init__(self, is_open: bool = True):
        self.is_open = is_open

    def is_open_now(self):
        return self.is_open

    def describe(self):
        return "8:00 AM - 8:00 PM"


@pytest.fixture
def session_factory():
    """In-memory SQLite shared across connections (StaticPool), seeded with products."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    seed_catalog(TestingSessionLocal)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def business_hours():
    return FixedBusinessHours(is_open=True)


@pytest.fixture
def services(session_factory, messenger, business_hours):
    built = build_services(
        session_factory=session_factory,
        messenger=messenger,
        business_hours=business_hours,
        store=UserStateStore(cleanup_probability=0),
    )
    yield built
    built.notifier.shutdown(wait=True)


@pytest.fixture
def conversation(services):
    return services.conversation


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def client(services, session_factory):
    """FastAPI TestClient over the in-memory database and fake messenger."""
    app = create_app(services=services, verify_token=TEST_VERIFY_TOKEN, create_tables=False)

    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_order(session_factory):
    """Insert an order directly. Returns its id."""

    def _make(status="pending", sender_id="user-1", items=(("Chocolate Cake", 2, 25.0),), **fields):
        session = session_factory()
        try:
            subtotal = round(sum(q * p for _, q, p in items), 2)
            order = Order(
                customer_name=fields.pop("customer_name", "Ana"),
                delivery_type=fields.pop("delivery_type", "pickup"),
                address=fields.pop("address", "Pickup at store"),
                status=status,
                total_items=sum(q for _, q, _ in items),
                subtotal=subtotal,
                delivery_fee=0.0,
                total_amount=subtotal,
                sender_id=sender_id,
                **fields,
            )
            session.add(order)
            session.flush()
            for product, quantity, price in items:
                session.add(OrderItem(order_id=order.id, product=product, quantity=quantity, price=price))
            session.commit()
            return order.id
        finally:
            session.close()

    return _make
