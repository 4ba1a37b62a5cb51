"""
FastAPI Application Entry Point.

Serves the HTTP API and, when the Telegram channel is enabled in
webhook mode, the Telegram webhook on the same event loop.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from messenger.backend.api import health
from messenger.backend.api.v1 import router as api_v1_router
from messenger.backend.core.config import AppConfig, get_app_config
from messenger.backend.core.database import dispose_engine
from messenger.backend.core.exception_handlers import register_exception_handlers
from messenger.backend.core.logging import get_logger, setup_logging
from messenger.backend.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging()

    if app_config.features.security_startup_checks_enabled:
        from messenger.backend.core.startup_checks import run_startup_checks
        run_startup_checks()

    logger.info(
        "Application starting",
        app_name=app_config.application.name,
        env=app_config.application.environment,
    )
    await _start_channel_adapters(app_config)
    yield
    await _shutdown_channel_adapters(app_config)
    await dispose_engine()
    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix="/api/v1")

    _mount_channel_adapters(app, app_config)

    return app


def _mount_channel_adapters(app: FastAPI, app_config: AppConfig) -> None:
    """Mount the Telegram webhook when the channel runs in webhook mode."""
    features = app_config.features
    if not (features.channel_telegram_enabled and features.telegram_webhook_enabled):
        return

    from messenger.telegram.bot import get_bot, get_dispatcher
    from messenger.telegram.webhook import get_webhook_router

    app.include_router(get_webhook_router(get_bot(), get_dispatcher()))
    logger.info("Telegram webhook mounted", path=app_config.application.telegram.webhook_path)


async def _start_channel_adapters(app_config: AppConfig) -> None:
    """Register the webhook URL with Telegram when running in webhook mode."""
    features = app_config.features
    if not (features.channel_telegram_enabled and features.telegram_webhook_enabled):
        return

    from messenger.backend.core.config import get_settings
    from messenger.telegram.bot import get_bot, setup_webhook
    from messenger.telegram.webhook import get_webhook_url

    webhook_url = get_webhook_url(app_config.application.app_url)
    await setup_webhook(get_bot(), webhook_url, get_settings().telegram_webhook_secret)


async def _shutdown_channel_adapters(app_config: AppConfig) -> None:
    features = app_config.features
    if features.channel_telegram_enabled and features.telegram_webhook_enabled:
        from messenger.telegram.bot import close_bot
        await close_bot()


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn messenger.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
