"""
Integration tests for the Telegram handlers.

Handlers are called directly with mocked aiogram messages against a real
database session, the way the dispatcher would call them after the
middlewares have injected ``session``, ``account`` and ``chat_sessions``.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.filters import CommandObject
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.config import get_app_config
from messenger.backend.core.exceptions import ExternalServiceError
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.services.client import ClientService
from messenger.backend.services.message import MessageService
from messenger.backend.services.telegram_link import TelegramLinkService
from messenger.backend.services.usage import UsageLedger
from messenger.telegram.callbacks.common import DraftCallback
from messenger.telegram.handlers.clients import cmd_clients, log_client_message
from messenger.telegram.handlers.common import cmd_start
from messenger.telegram.handlers.drafts import (
    GENERATION_FAILED,
    LOGGED_TEXT,
    cmd_improve,
    cmd_log,
    cmd_respond,
    on_draft_action,
)
from messenger.telegram.middlewares.auth import NOT_LINKED_TEXT
from messenger.telegram.replies import (
    IMPROVE_USAGE,
    LINK_INVALID,
    NO_ACTIVE_CLIENT,
    NOTHING_TO_LOG,
)
from messenger.telegram.sessions import ChatSessionStore
from tests.integration.conftest import DRAFT_TEXT

CHAT_ID = 555


def make_message(text: str = "", chat_id: int = CHAT_ID, username: str | None = "ana_photo") -> MagicMock:
    message = MagicMock()
    message.text = text
    message.chat.id = chat_id
    message.from_user.username = username
    message.answer = AsyncMock()
    return message


def last_reply(message: MagicMock) -> str:
    return message.answer.await_args.args[0]


def command(name: str, args: str | None = None) -> CommandObject:
    return CommandObject(prefix="/", command=name, args=args)


@pytest.fixture
def chat_sessions() -> ChatSessionStore:
    return ChatSessionStore()


async def _log(text, db_session, account, chat_sessions) -> MagicMock:
    message = make_message(text)
    await log_client_message(message, db_session, account, chat_sessions)
    return message


class TestStart:
    async def test_start_without_token_unlinked(self, db_session: AsyncSession, chat_sessions):
        message = make_message("/start")

        await cmd_start(message, command("start"), db_session, chat_sessions, account=None)

        assert last_reply(message) == NOT_LINKED_TEXT

    async def test_start_with_token_links_chat(self, db_session: AsyncSession, account, chat_sessions):
        token, _ = await TelegramLinkService(db_session).issue(account.id)
        chat_sessions.set_active_client(CHAT_ID, "stale")
        message = make_message(f"/start {token}")

        await cmd_start(message, command("start", token), db_session, chat_sessions, account=None)

        assert "ana@example.com" in last_reply(message)
        linked = await AccountRepository(db_session).get_by_telegram_chat_id(CHAT_ID)
        assert linked.id == account.id
        assert linked.telegram_username == "ana_photo"
        assert chat_sessions.get(CHAT_ID).active_client_id is None

    async def test_start_with_used_token(self, db_session: AsyncSession, account, chat_sessions):
        service = TelegramLinkService(db_session)
        token, _ = await service.issue(account.id)
        await service.redeem(token, chat_id=777, username=None)
        message = make_message(f"/start {token}")

        await cmd_start(message, command("start", token), db_session, chat_sessions, account=None)

        assert last_reply(message) == LINK_INVALID
        assert await AccountRepository(db_session).get_by_telegram_chat_id(CHAT_ID) is None


class TestClientMessages:
    async def test_first_mention_creates_client(self, db_session: AsyncSession, account, chat_sessions):
        message = await _log("@Maya Chen: Is June 3 still open?", db_session, account, chat_sessions)

        assert last_reply(message).startswith("Created new client: Maya Chen ✓")
        clients = await ClientService(db_session).list_clients(account)
        assert [c.name for c in clients] == ["Maya Chen"]
        assert chat_sessions.get(CHAT_ID).active_client_id == clients[0].id
        thread = await MessageService(db_session).list_messages(account, clients[0].id)
        assert [(m.direction, m.text) for m in thread] == [("inbound", "Is June 3 still open?")]

    async def test_later_mention_reuses_client(self, db_session: AsyncSession, account, chat_sessions):
        await _log("@Maya: hi", db_session, account, chat_sessions)

        message = await _log("@maya: are you there?", db_session, account, chat_sessions)

        assert last_reply(message).startswith("Logged for Maya ✓")
        assert len(await ClientService(db_session).list_clients(account)) == 1

    async def test_malformed_message(self, db_session: AsyncSession, account, chat_sessions):
        message = await _log("@Maya without a colon", db_session, account, chat_sessions)

        assert "@ClientName: their message" in last_reply(message)
        assert await ClientService(db_session).list_clients(account) == []

    async def test_client_limit_reply(self, db_session: AsyncSession, account, chat_sessions, monkeypatch):
        monkeypatch.setattr(get_app_config().plans.free, "clients", 1)
        await _log("@Maya: hi", db_session, account, chat_sessions)

        message = await _log("@Leo: hello", db_session, account, chat_sessions)

        reply = last_reply(message)
        assert reply.startswith("⚠️ ")
        assert "limit of 1 clients" in reply
        assert "Credits reset" not in reply

    async def test_html_in_names_is_escaped(self, db_session: AsyncSession, account, chat_sessions):
        message = await _log("@<b>Maya</b>: hi", db_session, account, chat_sessions)

        assert "&lt;b&gt;Maya&lt;/b&gt;" in last_reply(message)

    async def test_clients_list(self, db_session: AsyncSession, account, chat_sessions):
        await _log("@Maya: hi", db_session, account, chat_sessions)
        await _log("@Leo: hello", db_session, account, chat_sessions)
        message = make_message("/clients")

        await cmd_clients(message, db_session, account)

        assert "1. Maya\n2. Leo" in last_reply(message)


class TestDrafts:
    async def test_respond_needs_active_client(self, db_session: AsyncSession, account, chat_sessions, ai_service):
        message = make_message("/respond")

        await cmd_respond(message, db_session, account, chat_sessions, ai_service)

        assert last_reply(message) == NO_ACTIVE_CLIENT

    async def test_respond_sends_draft_with_buttons(
        self, db_session: AsyncSession, account, chat_sessions, ai_service,
    ):
        await _log("@Maya: Is June 3 open?", db_session, account, chat_sessions)
        message = make_message("/respond")

        await cmd_respond(message, db_session, account, chat_sessions, ai_service)

        assert last_reply(message) == f"<b>Draft:</b>\n\n{DRAFT_TEXT}"
        assert message.answer.await_args.kwargs["reply_markup"] is not None
        assert chat_sessions.get(CHAT_ID).last_draft == DRAFT_TEXT
        counts = (await UsageLedger(db_session).get_usage(account)).counts
        assert counts["ai_respond"] == 1

    async def test_improve_requires_text(self, db_session: AsyncSession, account, chat_sessions, ai_service):
        message = make_message("/improve")

        await cmd_improve(message, command("improve"), db_session, account, chat_sessions, ai_service)

        assert last_reply(message) == IMPROVE_USAGE

    async def test_improve(self, db_session: AsyncSession, account, chat_sessions, ai_service):
        await _log("@Maya: Is June 3 open?", db_session, account, chat_sessions)
        message = make_message("/improve yes its free")

        await cmd_improve(
            message, command("improve", "yes its free"), db_session, account, chat_sessions, ai_service,
        )

        assert last_reply(message).startswith("<b>Improved:</b>")
        assert (await UsageLedger(db_session).get_usage(account)).counts["ai_improve"] == 1

    async def test_out_of_credits(
        self, db_session: AsyncSession, account, chat_sessions, ai_service, monkeypatch,
    ):
        monkeypatch.setattr(get_app_config().plans.free, "ai_respond", 1)
        await _log("@Maya: hi", db_session, account, chat_sessions)
        await cmd_respond(make_message("/respond"), db_session, account, chat_sessions, ai_service)
        message = make_message("/respond")

        await cmd_respond(message, db_session, account, chat_sessions, ai_service)

        reply = last_reply(message)
        assert reply.startswith("⚠️ You've used all 1 AI response credits this month")
        assert "\nCredits reset on " in reply

    async def test_provider_failure_keeps_credit(
        self, db_session: AsyncSession, account, chat_sessions, ai_service, monkeypatch,
    ):
        monkeypatch.setattr(
            ai_service, "generate_response", AsyncMock(side_effect=ExternalServiceError("boom")),
        )
        await _log("@Maya: hi", db_session, account, chat_sessions)
        message = make_message("/respond")

        await cmd_respond(message, db_session, account, chat_sessions, ai_service)

        assert last_reply(message) == GENERATION_FAILED
        assert (await UsageLedger(db_session).get_usage(account)).counts["ai_respond"] == 1
        assert chat_sessions.get(CHAT_ID).last_draft is None


class TestLogging:
    async def test_nothing_to_log(self, db_session: AsyncSession, account, chat_sessions):
        message = make_message("/log")

        await cmd_log(message, db_session, account, chat_sessions)

        assert last_reply(message) == NOTHING_TO_LOG

    async def test_log_saves_outbound(self, db_session: AsyncSession, account, chat_sessions, ai_service):
        await _log("@Maya: Is June 3 open?", db_session, account, chat_sessions)
        await cmd_respond(make_message("/respond"), db_session, account, chat_sessions, ai_service)
        message = make_message("/log")

        await cmd_log(message, db_session, account, chat_sessions)

        assert last_reply(message) == LOGGED_TEXT
        client_id = chat_sessions.get(CHAT_ID).active_client_id
        thread = await MessageService(db_session).list_messages(account, client_id)
        assert [m.direction for m in thread] == ["inbound", "outbound"]
        assert thread[-1].text == DRAFT_TEXT
        assert chat_sessions.get(CHAT_ID).last_draft is None

    async def test_log_button(self, db_session: AsyncSession, account, chat_sessions):
        await _log("@Maya: hi", db_session, account, chat_sessions)
        chat_sessions.set_draft(CHAT_ID, "See you then!")
        callback = MagicMock()
        callback.message.chat.id = CHAT_ID
        callback.message.answer = AsyncMock()
        callback.answer = AsyncMock()

        await on_draft_action(callback, DraftCallback(action="log"), db_session, account, chat_sessions)

        callback.answer.assert_awaited_once()
        assert callback.message.answer.await_args.args[0] == LOGGED_TEXT

    async def test_discard_button(self, db_session: AsyncSession, account, chat_sessions):
        chat_sessions.set_draft(CHAT_ID, "See you then!")
        callback = MagicMock()
        callback.message.chat.id = CHAT_ID
        callback.message.answer = AsyncMock()
        callback.answer = AsyncMock()

        await on_draft_action(callback, DraftCallback(action="discard"), db_session, account, chat_sessions)

        assert callback.message.answer.await_args.args[0] == "Draft discarded."
        assert chat_sessions.get(CHAT_ID).last_draft is None
