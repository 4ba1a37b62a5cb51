"""
Chat Session Store.

In-memory conversation state per Telegram chat: the client the chat is
currently talking about and the last AI draft. State is lost on restart.

One store is created with the dispatcher and injected into handlers as
``chat_sessions``.
"""

from dataclasses import dataclass


@dataclass
class ChatSession:
    """State for one chat."""

    active_client_id: str | None = None
    last_draft: str | None = None


class ChatSessionStore:
    """Chat id to ``ChatSession`` mapping."""

    def __init__(self) -> None:
        self._sessions: dict[int, ChatSession] = {}

    def get(self, chat_id: int) -> ChatSession:
        """Return the chat's session, creating an empty one on first use."""
        session = self._sessions.get(chat_id)
        if session is None:
            session = ChatSession()
            self._sessions[chat_id] = session
        return session

    def set_active_client(self, chat_id: int, client_id: str) -> None:
        """Switch the active client. Any pending draft belonged to the old one."""
        session = self.get(chat_id)
        session.active_client_id = client_id
        session.last_draft = None

    def set_draft(self, chat_id: int, draft: str) -> None:
        self.get(chat_id).last_draft = draft

    def clear_draft(self, chat_id: int) -> None:
        self.get(chat_id).last_draft = None

    def reset(self, chat_id: int) -> None:
        """Forget everything about the chat."""
        self._sessions.pop(chat_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
