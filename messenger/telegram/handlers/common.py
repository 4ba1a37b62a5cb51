"""
Common Handlers.

/start (with or without a link token) and /help. These are the only
commands an unlinked chat may use.
"""

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.logging import get_logger, log_with_source
from messenger.backend.models.account import Account
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.services.telegram_link import TelegramLinkService
from messenger.telegram.middlewares.auth import NOT_LINKED_TEXT
from messenger.telegram.replies import HELP_TEXT, LINK_INVALID, linked_reply
from messenger.telegram.sessions import ChatSessionStore

logger = get_logger(__name__)

router = Router(name="common")


@router.message(CommandStart())
async def cmd_start(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    chat_sessions: ChatSessionStore,
    account: Account | None = None,
) -> None:
    """
    Handle /start.

    ``/start <token>`` redeems a link token and binds this chat to the
    token's account, replacing any previous binding of the chat.
    """
    chat_id = message.chat.id
    token = (command.args or "").strip()

    if not token:
        if account is None:
            await message.answer(NOT_LINKED_TEXT)
        else:
            await message.answer(f"👋 Welcome back!\n\n{HELP_TEXT}")
        return

    username = message.from_user.username if message.from_user else None
    account_id = await TelegramLinkService(session).redeem(token, chat_id, username)
    if account_id is None:
        await message.answer(LINK_INVALID)
        return

    linked = await AccountRepository(session).get_by_id(account_id)
    chat_sessions.reset(chat_id)
    log_with_source(logger, "telegram", "info", "Chat linked via /start", chat_id=chat_id)
    await message.answer(linked_reply(linked.email))


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    """Handle /help."""
    await message.answer(HELP_TEXT)
