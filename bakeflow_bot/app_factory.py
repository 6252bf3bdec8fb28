"""
Application factory for the BakeFlow FastAPI app.

build_services() wires the conversation and order services together;
create_app() builds the FastAPI application around them. Tests call both
with an in-memory database and a recording messenger.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from .config import CORS_ORIGINS, VERIFY_TOKEN
from .db import get_session_factory, init_db
from .messenger import MessengerClient
from .routes import admin_orders_router, chat_orders_router, limiter, webhook_router
from .services.business_hours import BusinessHours
from .services.catalog import DatabaseCatalog, ProductCatalog
from .services.conversation import ConversationService
from .services.notifier import OrderNotifier
from .services.order import OrderSubmission
from .services.order_status import OrderStatusWorkflow
from .services.state_store import UserStateStore
from .tasks.message_builder import MessageBuilder
from .tasks.pricing import PricingEngine
from .tasks.state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


@dataclass
class BakeFlowServices:
    conversation: ConversationService
    status_workflow: OrderStatusWorkflow
    notifier: OrderNotifier
    store: UserStateStore
    submission: OrderSubmission
    catalog: ProductCatalog


def build_services(
    session_factory: Optional[Callable[[], Session]] = None,
    messenger=None,
    business_hours: Optional[BusinessHours] = None,
    catalog: Optional[ProductCatalog] = None,
    store: Optional[UserStateStore] = None,
) -> BakeFlowServices:
    """
    Wire the services used by the routes.

    Anything not passed in gets its production default: the shared session
    factory, the Messenger client (mock mode without a page token), the
    configured business hours and the database catalog.
    """
    session_factory = session_factory or get_session_factory()
    messenger = messenger or MessengerClient()
    business_hours = business_hours or BusinessHours()
    catalog = catalog or DatabaseCatalog(session_factory)
    store = store or UserStateStore()

    pricing = PricingEngine(catalog.price_for)
    message_builder = MessageBuilder(pricing, hours_text=business_hours.describe())
    submission = OrderSubmission(session_factory, pricing)

    state_machine = OrderStateMachine(
        catalog,
        message_builder,
        business_hours,
        submit_order=submission.submit,
        session_factory=session_factory,
    )
    notifier = OrderNotifier(messenger)

    return BakeFlowServices(
        conversation=ConversationService(store, state_machine, submission, messenger),
        status_workflow=OrderStatusWorkflow(session_factory, notifier),
        notifier=notifier,
        store=store,
        submission=submission,
        catalog=catalog,
    )


def create_app(
    services: Optional[BakeFlowServices] = None,
    verify_token: str = VERIFY_TOKEN,
    create_tables: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Pre-built services (built with defaults if None).
        verify_token: Token expected by the webhook handshake.
        create_tables: Run init_db() at startup.

    Returns:
        Configured FastAPI application
    """
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            init_db()
        logger.info("BakeFlow started")
        yield
        services.notifier.shutdown(wait=False)
        logger.info("BakeFlow stopped")

    app = FastAPI(
        title="BakeFlow Bot API",
        description="Chat ordering bot for a bakery",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.state.services = services
    app.state.conversation_service = services.conversation
    app.state.status_workflow = services.status_workflow
    app.state.verify_token = verify_token

    # Include routers with API version prefix
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(webhook_router)
    api_v1.include_router(admin_orders_router)
    api_v1.include_router(chat_orders_router)
    app.include_router(api_v1)

    # Also mount at root; Messenger is configured with /webhook
    app.include_router(webhook_router)
    app.include_router(admin_orders_router)
    app.include_router(chat_orders_router)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "active_conversations": len(services.store),
        }

    logger.info("Application created")
    return app
