"""
Unit tests for bot and dispatcher construction.
"""

from unittest.mock import MagicMock

import pytest

from messenger.backend.services.ai import AIService
from messenger.telegram.bot import create_bot, create_dispatcher
from messenger.telegram.sessions import ChatSessionStore


def test_create_bot_requires_token():
    with pytest.raises(RuntimeError, match="TELEGRAM_BOT_TOKEN"):
        create_bot()


def test_create_dispatcher_wires_shared_state():
    """Routers attach to one dispatcher per process, so everything is checked here."""
    store = ChatSessionStore()
    ai = AIService()

    dp = create_dispatcher(chat_sessions=store, ai_service=ai, session_factory=MagicMock())

    assert dp["chat_sessions"] is store
    assert dp["ai_service"] is ai
    assert [router.name for router in dp.sub_routers] == ["common", "drafts", "clients"]
    assert len(dp.update.outer_middleware) == 3
