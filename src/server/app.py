"""FastAPI application receiving Green API webhooks."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.activity.logger import ActivityLogger
from src.catalog.client import CatalogApi, CatalogClient
from src.commands.router import CommandRouter
from src.config import Settings, configure_logging, load_settings
from src.session.store import SessionStore
from src.shop.db import ShopConfigDB
from src.transport.greenapi import GreenApiSender, MessageSender, MockSender
from src.webhook.handler import WebhookHandler
from src.webhook.payload import WebhookValidationError

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = load_settings()
    configure_logging(settings.log_level)
    activity_logger = (
        ActivityLogger.from_env(settings.activity_log_path)
        if settings.activity_log_path else None
    )
    return create_app(settings, activity_logger=activity_logger)


def _build_sender(settings: Settings) -> MessageSender:
    if settings.mock_mode:
        logger.warning("mock_mode_enabled outbound messages are logged, not sent")
        return MockSender()
    return GreenApiSender(settings.green_api_instance_id, settings.green_api_token)


async def _sweep_sessions(sessions: SessionStore, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = sessions.cleanup()
        if removed:
            logger.info("sessions_swept removed=%d remaining=%d", removed, len(sessions))


def create_app(
    settings: Settings,
    sender: MessageSender | None = None,
    catalog: CatalogApi | None = None,
    sessions: SessionStore | None = None,
    shop_db: ShopConfigDB | None = None,
    activity_logger: ActivityLogger | None = None,
) -> FastAPI:
    """Wire collaborators and build the app. Arguments override defaults."""
    if shop_db is None:
        shop_db = ShopConfigDB(settings.db_path)
        shop_db.seed(settings.phone_number, settings.shop_url, settings.auth_token)
    if sender is None:
        sender = _build_sender(settings)
    if catalog is None:
        catalog = CatalogClient(settings.shop_url, settings.auth_token)
    if sessions is None:
        sessions = SessionStore(settings.session_timeout_seconds)

    router = CommandRouter(catalog, sessions, activity_logger)
    handler = WebhookHandler(
        router,
        sender,
        registered_chat_id=settings.chat_id,
        reply_to_unregistered=settings.reply_to_unregistered,
        activity_logger=activity_logger,
    )

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        sweeper: asyncio.Task[None] | None = None
        if settings.session_sweep_seconds > 0:
            sweeper = asyncio.create_task(
                _sweep_sessions(sessions, settings.session_sweep_seconds),
            )
        logger.info("server_started chat_id=%s", settings.chat_id)
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
            shop_db.close()

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.settings = settings
    app.state.sessions = sessions
    app.state.handler = handler
    app.state.shop_db = shop_db

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        # Always 200 so the gateway does not redeliver.
        try:
            body = await request.json()
        except ValueError:
            logger.error("webhook_invalid_json")
            return JSONResponse({"ok": False, "error": "invalid_payload", "field": "body"})

        try:
            outcome = await handler.handle(body)
        except WebhookValidationError as exc:
            return JSONResponse({"ok": False, "error": "invalid_payload", "field": exc.field})
        except Exception:
            logger.exception("webhook_error")
            return JSONResponse({"ok": False, "error": "processing_failed"})

        return JSONResponse({"ok": True, **outcome.to_dict()})

    return app
