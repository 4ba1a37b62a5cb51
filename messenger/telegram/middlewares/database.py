"""
Database Middleware.

Opens one SQLAlchemy session per Telegram update and exposes it to
handlers as ``session``. Commits when the handler returns, rolls back
when it raises.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from messenger.backend.core.database import get_session_factory


class DatabaseMiddleware(BaseMiddleware):
    """
    Per-update database session.

    Usage:
        dp.update.outer_middleware(DatabaseMiddleware())

        @router.message(Command("clients"))
        async def cmd_clients(message: Message, session: AsyncSession): ...
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        factory = self._session_factory or get_session_factory()
        async with factory() as session:
            data["session"] = session
            try:
                result = await handler(event, data)
                await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise
