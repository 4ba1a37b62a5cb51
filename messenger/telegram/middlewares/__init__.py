"""
Telegram Bot Middlewares.

aiogram v3 middleware scopes:
- Outer middleware: Runs on every update (logging, database session, account lookup)
- Inner middleware: Runs after filters pass (rate limiting)
"""

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from messenger.telegram.middlewares.auth import AccountMiddleware
from messenger.telegram.middlewares.database import DatabaseMiddleware
from messenger.telegram.middlewares.logging import LoggingMiddleware
from messenger.telegram.middlewares.rate_limit import RateLimitMiddleware

if TYPE_CHECKING:
    from aiogram import Dispatcher

__all__ = [
    "AccountMiddleware",
    "DatabaseMiddleware",
    "LoggingMiddleware",
    "RateLimitMiddleware",
    "setup_middlewares",
]


def setup_middlewares(
    dp: "Dispatcher",
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """
    Setup all middlewares on the dispatcher.

    Middleware order matters:
    1. LoggingMiddleware (outer) - Log all updates
    2. DatabaseMiddleware (outer) - One session per update, committed at the end
    3. AccountMiddleware (outer) - Resolve the linked account, gate unlinked chats
    4. RateLimitMiddleware (inner) - Rate limit after filters pass
    """
    dp.update.outer_middleware(LoggingMiddleware())
    dp.update.outer_middleware(DatabaseMiddleware(session_factory))
    dp.update.outer_middleware(AccountMiddleware())

    dp.message.middleware(RateLimitMiddleware())
    dp.callback_query.middleware(RateLimitMiddleware())
