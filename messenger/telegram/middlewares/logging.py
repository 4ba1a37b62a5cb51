"""
Logging Middleware.

Logs all incoming Telegram updates with structured context.
Message text is never logged, only its length and the command name.
"""

import time
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from messenger.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class LoggingMiddleware(BaseMiddleware):
    """
    Middleware for logging all Telegram updates.

    Logs update type and id, chat and user ids, processing time and errors.
    All records carry source="telegram".

    Usage:
        dp.update.outer_middleware(LoggingMiddleware())
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        start_time = time.perf_counter()
        context = self._extract_context(event)

        log_with_source(logger, "telegram", "info", "Telegram update received", **context)

        try:
            result = await handler(event, data)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            log_with_source(
                logger,
                "telegram",
                "error",
                "Telegram update processing error",
                error_type=type(e).__name__,
                elapsed_ms=round(elapsed_ms, 2),
                **context,
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log_with_source(
            logger,
            "telegram",
            "debug",
            "Telegram update processed",
            elapsed_ms=round(elapsed_ms, 2),
            **context,
        )
        return result

    def _extract_context(self, event: TelegramObject) -> dict[str, Any]:
        """Extract logging context from the event."""
        context: dict[str, Any] = {}

        if not isinstance(event, Update):
            return context

        context["update_id"] = event.update_id
        context["update_type"] = event.event_type

        if event.message:
            msg = event.message
            context["chat_id"] = msg.chat.id
            if msg.from_user:
                context["user_id"] = msg.from_user.id
            if msg.text:
                if msg.text.startswith("/"):
                    context["command"] = msg.text.split()[0]
                context["text_length"] = len(msg.text)

        elif event.callback_query:
            cb = event.callback_query
            if cb.from_user:
                context["user_id"] = cb.from_user.id
            if cb.message:
                context["chat_id"] = cb.message.chat.id
            context["callback_data"] = cb.data

        return context
