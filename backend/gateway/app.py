"""
Bot Gateway - FastAPI Backend
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send
import uvicorn

from gateway.config import settings
from gateway.database.db import init_db
from gateway.errors import register_exception_handlers
from gateway.logging import setup_logging, get_logger
from gateway.routers import bots, relay
from gateway.services.bot_config import BotConfigService
from gateway.services.chat_relay import ChatRelayService
from gateway.services.gemini import GeminiService
from gateway.services.origin_gate import OriginGate
from gateway.services.rate_limit import (
    InMemoryWindowStore,
    RedisWindowStore,
    build_rate_limiters,
)

logger = get_logger('main')


class AdminCORSMiddleware(CORSMiddleware):
    """Static CORS for the management endpoints; skips paths with their own origin gate."""

    def __init__(self, app: ASGIApp, exempt_paths: tuple[str, ...] = (), **kwargs):
        super().__init__(app, **kwargs)
        self.exempt_paths = set(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.DEBUG)
    logger.info("Starting Bot Gateway API")

    await init_db(settings.DATABASE_PATH)
    logger.info("Database initialized")

    # Initialize services
    gemini = GeminiService()
    await gemini.initialize()
    app.state.gemini = gemini

    app.state.bot_config_service = BotConfigService(
        db_path=settings.DATABASE_PATH,
        default_created_by=settings.DEFAULT_CREATED_BY,
    )
    app.state.origin_gate = OriginGate(app.state.bot_config_service)
    app.state.chat_relay_service = ChatRelayService(
        gemini=gemini,
        max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
        strategy=settings.SYSTEM_PROMPT_STRATEGY,
    )

    if settings.REDIS_URL:
        store = RedisWindowStore.from_url(settings.REDIS_URL)
        logger.info("Rate limit counters shared through Redis")
    else:
        store = InMemoryWindowStore()
        logger.info("Rate limit counters kept in process memory")
    app.state.rate_limit_store = store
    app.state.ip_rate_limiter, app.state.bot_rate_limiter = build_rate_limiters(
        store,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        ip_limit=settings.IP_RATE_LIMIT,
        bot_limit=settings.BOT_RATE_LIMIT,
    )
    logger.info("Services initialized")

    yield

    logger.info("Shutting down application")
    if isinstance(store, RedisWindowStore):
        await store.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Bot Gateway API",
        description="Multi-tenant chatbot gateway relaying conversations to Gemini",
        version="1.0.0",
        lifespan=lifespan
    )

    if settings.ADMIN_CORS_ORIGINS:
        app.add_middleware(
            AdminCORSMiddleware,
            exempt_paths=(relay.RELAY_PATH,),
            allow_origins=settings.ADMIN_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(bots.router, tags=["Bots"])
    app.include_router(relay.router, tags=["Relay"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "bot-gateway",
            "gemini_available": app.state.gemini.is_available if hasattr(app.state, 'gemini') else False,
        }

    return app


def run() -> None:
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT)
