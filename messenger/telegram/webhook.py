"""
Webhook Endpoint for Telegram Bot.

FastAPI router that feeds Telegram webhook requests into the dispatcher.
"""

import hmac
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response

from messenger.backend.core.config import get_app_config, get_settings
from messenger.backend.core.logging import get_logger, log_with_source

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_webhook_router(bot: "Bot", dp: "Dispatcher") -> APIRouter:
    """
    Create a FastAPI router for handling Telegram webhook requests.

    Usage:
        webhook_router = get_webhook_router(get_bot(), get_dispatcher())
        app.include_router(webhook_router)
    """
    from aiogram.types import Update

    router = APIRouter(tags=["telegram"])

    webhook_path = get_app_config().application.telegram.webhook_path
    webhook_secret = get_settings().telegram_webhook_secret

    @router.post(webhook_path)
    async def telegram_webhook(request: Request) -> Response:
        """Validate the secret header and process the update."""
        if webhook_secret:
            secret_header = request.headers.get(SECRET_HEADER)
            if not secret_header or not hmac.compare_digest(secret_header, webhook_secret):
                logger.warning(
                    "Invalid webhook secret token",
                    client_ip=request.client.host if request.client else None,
                )
                return Response(status_code=403)

        try:
            update = Update.model_validate(await request.json(), context={"bot": bot})
            await dp.feed_update(bot, update)
        except Exception as e:
            # Always 200: Telegram redelivers anything else.
            log_with_source(
                logger,
                "telegram",
                "error",
                "Error processing Telegram update",
                error_type=type(e).__name__,
                exc_info=True,
            )
        return Response(status_code=200)

    @router.get(webhook_path + "/health")
    async def telegram_webhook_health() -> dict:
        """Health check for the Telegram webhook endpoint."""
        return {"status": "healthy", "webhook_path": webhook_path}

    return router


def get_webhook_url(base_url: str) -> str:
    """Full webhook URL for a base URL such as ``https://example.com``."""
    webhook_path = get_app_config().application.telegram.webhook_path
    return f"{base_url.rstrip('/')}{webhook_path}"
