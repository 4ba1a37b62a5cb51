"""
Account Middleware.

Resolves the account linked to the chat and exposes it to handlers as
``account``. A chat that is not linked may only use /start and /help;
anything else gets a short reply explaining how to link.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from messenger.backend.core.logging import get_logger, log_with_source
from messenger.backend.repositories.account import AccountRepository

logger = get_logger(__name__)

UNLINKED_COMMANDS = frozenset({"/start", "/help"})

NOT_LINKED_TEXT = (
    "This chat isn't linked to an account yet.\n\n"
    "Open Settings in the web app, choose Connect Telegram, and follow the link."
)


def _command_of(text: str | None) -> str | None:
    """``/start@MyBot payload`` -> ``/start``."""
    if not text or not text.startswith("/"):
        return None
    return text.split(maxsplit=1)[0].split("@", 1)[0].lower()


class AccountMiddleware(BaseMiddleware):
    """
    Account lookup by Telegram chat id.

    Must run after DatabaseMiddleware.

    Usage:
        dp.update.outer_middleware(AccountMiddleware())

        @router.message(Command("clients"))
        async def cmd_clients(message: Message, account: Account): ...
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        if not isinstance(event, Update):
            return await handler(event, data)

        chat_id = None
        text = None
        if event.message:
            chat_id = event.message.chat.id
            text = event.message.text
        elif event.callback_query and event.callback_query.message:
            chat_id = event.callback_query.message.chat.id

        if chat_id is None:
            return await handler(event, data)

        account = await AccountRepository(data["session"]).get_by_telegram_chat_id(chat_id)
        data["account"] = account
        if account is not None:
            return await handler(event, data)

        if event.message and _command_of(text) in UNLINKED_COMMANDS:
            return await handler(event, data)

        log_with_source(logger, "telegram", "info", "Update from unlinked chat dropped", chat_id=chat_id)
        if event.message:
            await event.message.answer(NOT_LINKED_TEXT)
        elif event.callback_query:
            await event.callback_query.answer(NOT_LINKED_TEXT, show_alert=True)
        return None
