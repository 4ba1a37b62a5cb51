"""
Draft Handlers.

/respond and /improve ask the AI for a draft for the chat's active client;
/log (or the "Log as sent" button) saves the last draft as an outbound
message. Each AI call consumes one monthly credit before the provider is
contacted, and a failed call does not give the credit back.
"""

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.exceptions import ExternalServiceError, NotFoundError
from messenger.backend.core.logging import get_logger, log_with_source
from messenger.backend.models.account import Account
from messenger.backend.models.client import Client
from messenger.backend.models.message import OUTBOUND
from messenger.backend.services.ai import AIService
from messenger.backend.services.client import ClientService
from messenger.backend.services.message import MessageService
from messenger.backend.services.usage import UsageLedger
from messenger.telegram.callbacks.common import DraftCallback
from messenger.telegram.keyboards.common import get_draft_keyboard
from messenger.telegram.replies import (
    ACTIVE_CLIENT_GONE,
    AI_UNAVAILABLE,
    IMPROVE_USAGE,
    NO_ACTIVE_CLIENT,
    NOTHING_TO_LOG,
    draft_reply,
    limit_reply,
)
from messenger.telegram.sessions import ChatSessionStore

logger = get_logger(__name__)

router = Router(name="drafts")

GENERATION_FAILED = "Failed to generate response. Try again."
LOGGED_TEXT = "Response logged as sent ✓"


async def _active_client(
    message: Message,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
) -> Client | None:
    """Load the chat's active client, replying and returning None when there is none."""
    chat_id = message.chat.id
    client_id = chat_sessions.get(chat_id).active_client_id
    if client_id is None:
        await message.answer(NO_ACTIVE_CLIENT)
        return None
    try:
        return await ClientService(session).get_client(account, client_id)
    except NotFoundError:
        chat_sessions.reset(chat_id)
        await message.answer(ACTIVE_CLIENT_GONE)
        return None


async def _consume_credit(
    message: Message,
    session: AsyncSession,
    account: Account,
    operation: str,
) -> bool:
    """Take one credit and commit it. Replies with the denial when out of credits."""
    decision = await UsageLedger(session).check_and_consume(account, operation)
    if not decision.allowed:
        await message.answer(limit_reply(decision))
        return False
    await session.commit()
    return True


@router.message(Command("respond"))
async def cmd_respond(
    message: Message,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
    ai_service: AIService,
) -> None:
    """Draft a reply to the active client's thread."""
    client = await _active_client(message, session, account, chat_sessions)
    if client is None:
        return
    if not ai_service.is_available():
        await message.answer(AI_UNAVAILABLE)
        return
    if not await _consume_credit(message, session, account, "ai_respond"):
        return

    history = await MessageService(session).list_messages(account, client.id)
    try:
        draft = await ai_service.generate_response(account, client, history)
    except ExternalServiceError:
        await message.answer(GENERATION_FAILED)
        return

    chat_sessions.set_draft(message.chat.id, draft)
    log_with_source(logger, "telegram", "info", "Draft sent", chat_id=message.chat.id, kind="respond")
    await message.answer(draft_reply(draft), reply_markup=get_draft_keyboard())


@router.message(Command("improve"))
async def cmd_improve(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
    ai_service: AIService,
) -> None:
    """Improve the draft given after the command."""
    draft = (command.args or "").strip()
    if not draft:
        await message.answer(IMPROVE_USAGE)
        return

    client = await _active_client(message, session, account, chat_sessions)
    if client is None:
        return
    if not ai_service.is_available():
        await message.answer(AI_UNAVAILABLE)
        return
    if not await _consume_credit(message, session, account, "ai_improve"):
        return

    history = await MessageService(session).list_messages(account, client.id)
    try:
        improved = await ai_service.improve_message(account, client, history, draft)
    except ExternalServiceError:
        await message.answer(GENERATION_FAILED)
        return

    chat_sessions.set_draft(message.chat.id, improved)
    log_with_source(logger, "telegram", "info", "Draft sent", chat_id=message.chat.id, kind="improve")
    await message.answer(draft_reply(improved, improved=True), reply_markup=get_draft_keyboard())


async def log_last_draft(
    chat_id: int,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
) -> str:
    """
    Save the chat's last draft as an outbound message for the active client.

    Returns:
        The reply text for the chat
    """
    state = chat_sessions.get(chat_id)
    if state.last_draft is None or state.active_client_id is None:
        return NOTHING_TO_LOG

    try:
        logged, decision = await MessageService(session).add_message(
            account, state.active_client_id, OUTBOUND, state.last_draft,
        )
    except NotFoundError:
        chat_sessions.reset(chat_id)
        return ACTIVE_CLIENT_GONE
    if logged is None:
        return limit_reply(decision)

    chat_sessions.clear_draft(chat_id)
    log_with_source(logger, "telegram", "info", "Draft logged as sent", chat_id=chat_id)
    return LOGGED_TEXT


@router.message(Command("log"))
async def cmd_log(
    message: Message,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
) -> None:
    """Save the last draft as sent."""
    await message.answer(await log_last_draft(message.chat.id, session, account, chat_sessions))


@router.callback_query(DraftCallback.filter())
async def on_draft_action(
    callback: CallbackQuery,
    callback_data: DraftCallback,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
) -> None:
    """Buttons under a draft."""
    chat_id = callback.message.chat.id
    if callback_data.action == "log":
        reply = await log_last_draft(chat_id, session, account, chat_sessions)
    else:
        chat_sessions.clear_draft(chat_id)
        reply = "Draft discarded."

    await callback.answer()
    await callback.message.answer(reply)
