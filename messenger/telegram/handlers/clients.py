"""
Client Handlers.

``@Name: text`` logs an inbound message for a client (creating the client
on first mention) and makes it the chat's active client. /clients lists
the account's clients.
"""

import re

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.logging import get_logger, log_with_source
from messenger.backend.models.account import Account
from messenger.backend.models.message import INBOUND
from messenger.backend.services.client import ClientService
from messenger.backend.services.message import MessageService
from messenger.backend.services.usage import UsageLedger
from messenger.telegram.replies import (
    NO_CLIENTS,
    USAGE_HINT,
    client_logged_reply,
    clients_reply,
    limit_reply,
)
from messenger.telegram.sessions import ChatSessionStore

logger = get_logger(__name__)

router = Router(name="clients")

CLIENT_MESSAGE_PATTERN = re.compile(r"^@([^:]+):\s*(.+)$", re.DOTALL)


def parse_client_message(text: str) -> tuple[str, str] | None:
    """Split ``@Name: text`` into (name, text), both stripped. None if it doesn't match."""
    match = CLIENT_MESSAGE_PATTERN.match(text.strip())
    if match is None:
        return None
    name, body = match.group(1).strip(), match.group(2).strip()
    if not name or not body:
        return None
    return name, body


@router.message(Command("clients"))
async def cmd_clients(message: Message, session: AsyncSession, account: Account) -> None:
    """List the account's clients, numbered."""
    clients = await ClientService(session).list_clients(account)
    if not clients:
        await message.answer(NO_CLIENTS)
        return
    await message.answer(clients_reply([c.name for c in clients]))


@router.message(F.text.startswith("@"))
async def log_client_message(
    message: Message,
    session: AsyncSession,
    account: Account,
    chat_sessions: ChatSessionStore,
) -> None:
    """Log ``@Name: text`` as an inbound message and make Name the active client."""
    parsed = parse_client_message(message.text or "")
    if parsed is None:
        await message.answer(USAGE_HINT)
        return
    name, body = parsed

    ledger = UsageLedger(session)
    client, decision = await ClientService(session, ledger).find_or_create_by_name(account, name)
    if client is None:
        await message.answer(limit_reply(decision))
        return
    is_new = decision is not None

    logged, message_decision = await MessageService(session, ledger).add_message(
        account, client.id, INBOUND, body,
    )
    if logged is None:
        await message.answer(limit_reply(message_decision))
        return

    chat_sessions.set_active_client(message.chat.id, client.id)
    log_with_source(
        logger,
        "telegram",
        "info",
        "Client message logged",
        chat_id=message.chat.id,
        client_id=client.id,
        new_client=is_new,
        length=len(body),
    )
    await message.answer(client_logged_reply(client.name, is_new))


@router.message(F.text & ~F.text.startswith("/"))
async def fallback_text(message: Message) -> None:
    """Any other plain text: explain the message format."""
    await message.answer(USAGE_HINT)
