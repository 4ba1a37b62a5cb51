"""
Bot and Dispatcher Configuration.

Creates and configures the aiogram Bot and Dispatcher instances.
Uses lazy initialization to prevent import-time failures.
"""

from typing import TYPE_CHECKING

from messenger.backend.core.logging import get_logger
from messenger.backend.services.ai import AIService
from messenger.telegram.sessions import ChatSessionStore

logger = get_logger(__name__)

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

_bot: "Bot | None" = None
_dispatcher: "Dispatcher | None" = None


def create_bot() -> "Bot":
    """
    Create and configure the aiogram Bot instance.

    Raises:
        RuntimeError: If TELEGRAM_BOT_TOKEN is not configured
    """
    from aiogram import Bot
    from aiogram.client.default import DefaultBotProperties
    from aiogram.enums import ParseMode

    from messenger.backend.core.config import get_settings

    settings = get_settings()

    if not settings.telegram_bot_token:
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Set TELEGRAM_BOT_TOKEN environment variable or configure it in config/.env"
        )

    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    logger.info("Telegram bot created")
    return bot


def create_dispatcher(
    chat_sessions: ChatSessionStore | None = None,
    ai_service: AIService | None = None,
    session_factory: "async_sessionmaker[AsyncSession] | None" = None,
) -> "Dispatcher":
    """
    Create and configure the aiogram Dispatcher instance.

    ``chat_sessions`` and ``ai_service`` are exposed to every handler
    through the dispatcher's workflow data.
    """
    from aiogram import Dispatcher

    from messenger.telegram.handlers import get_all_routers
    from messenger.telegram.middlewares import setup_middlewares

    dp = Dispatcher()
    dp["chat_sessions"] = chat_sessions or ChatSessionStore()
    dp["ai_service"] = ai_service or AIService()

    setup_middlewares(dp, session_factory)

    for router in get_all_routers():
        dp.include_router(router)

    logger.info("Telegram dispatcher created with routers and middlewares")
    return dp


def get_bot() -> "Bot":
    """Get or create the Bot instance (lazy initialization)."""
    global _bot
    if _bot is None:
        _bot = create_bot()
    return _bot


def get_dispatcher() -> "Dispatcher":
    """Get or create the Dispatcher instance (lazy initialization)."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = create_dispatcher()
    return _dispatcher


async def setup_webhook(bot: "Bot", webhook_url: str, secret_token: str) -> None:
    """
    Register the webhook with Telegram.

    Args:
        bot: Bot instance
        webhook_url: Full webhook URL (e.g., https://example.com/webhook/telegram)
        secret_token: Value Telegram echoes in X-Telegram-Bot-Api-Secret-Token
    """
    dp = get_dispatcher()

    await bot.set_webhook(
        url=webhook_url,
        secret_token=secret_token or None,
        drop_pending_updates=True,
        allowed_updates=dp.resolve_used_update_types(),
    )
    logger.info("Webhook configured", webhook_url=webhook_url)


async def close_bot() -> None:
    """Delete the webhook and close the bot's HTTP session, if a bot was created."""
    global _bot
    if _bot is None:
        return
    await _bot.delete_webhook()
    await _bot.session.close()
    _bot = None
    logger.info("Bot webhook deleted and session closed")
