"""
Rate Limiting Middleware.

Limits request frequency per Telegram user with an in-memory sliding
window. Counts reset on restart.
"""

import time
from collections import defaultdict
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from messenger.backend.core.config import get_app_config
from messenger.backend.core.logging import get_logger

logger = get_logger(__name__)


def _get_telegram_rate_limit() -> int:
    """Get telegram messages_per_minute from security.yaml."""
    return get_app_config().security.rate_limiting.telegram.messages_per_minute


class RateLimitMiddleware(BaseMiddleware):
    """
    Rate limiting middleware using a sliding window.

    Sends a warning when the limit is exceeded and drops the update.

    Usage:
        dp.message.middleware(RateLimitMiddleware())
        dp.message.middleware(RateLimitMiddleware(rate_limit=10, rate_window=30))
    """

    def __init__(
        self,
        rate_limit: int | None = None,
        rate_window: int = 60,
    ):
        self.rate_limit = rate_limit if rate_limit is not None else _get_telegram_rate_limit()
        self.rate_window = rate_window
        self._requests: dict[int, list[float]] = defaultdict(list)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user_id = self._get_user_id(event)
        if not user_id:
            return await handler(event, data)

        now = time.time()
        is_limited, remaining = self._check_rate_limit(user_id, now)

        if is_limited:
            logger.warning(
                "Rate limit exceeded",
                user_id=user_id,
                rate_limit=self.rate_limit,
                rate_window=self.rate_window,
            )
            await self._send_rate_limit_message(event, remaining)
            return None

        self._requests[user_id].append(now)
        return await handler(event, data)

    def _get_user_id(self, event: TelegramObject) -> int | None:
        if isinstance(event, (Message, CallbackQuery)) and event.from_user:
            return event.from_user.id
        return None

    def _check_rate_limit(self, user_id: int, now: float) -> tuple[bool, int]:
        """
        Check if user has exceeded rate limit.

        Returns:
            Tuple of (is_limited, seconds_until_reset)
        """
        window_start = now - self.rate_window
        self._requests[user_id] = [
            ts for ts in self._requests[user_id] if ts > window_start
        ]

        if len(self._requests[user_id]) >= self.rate_limit:
            oldest = min(self._requests[user_id])
            remaining = int(self.rate_window - (now - oldest)) + 1
            return True, remaining

        return False, 0

    async def _send_rate_limit_message(self, event: TelegramObject, remaining: int) -> None:
        message = f"⏳ Too many requests. Please wait {remaining} seconds."

        if isinstance(event, Message):
            await event.answer(message)
        elif isinstance(event, CallbackQuery):
            await event.answer(message, show_alert=True)
