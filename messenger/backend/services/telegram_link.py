"""
Telegram Link Service.

Issues short-lived single-use link tokens and binds a Telegram chat to the
account that issued the token.
"""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.config import get_app_config
from messenger.backend.core.security import generate_token
from messenger.backend.core.utils import utc_now
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.repositories.token import TelegramLinkTokenRepository
from messenger.backend.services.base import BaseService


class TelegramLinkService(BaseService):
    """Service for linking chats to accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.accounts = AccountRepository(session)
        self.tokens = TelegramLinkTokenRepository(session)

    async def issue(self, account_id: str) -> tuple[str, datetime]:
        """
        Issue a link token for the account.

        Expired and used tokens of every account are purged first. Earlier
        unused tokens of this account stay valid until they expire.

        Returns:
            Tuple of (token, expires_at)
        """
        now = utc_now()
        lifetime = timedelta(minutes=get_app_config().security.tokens.telegram_link_minutes)
        expires_at = now + lifetime

        purged = await self._execute_db_operation("purge_link_tokens", self.tokens.purge_stale(now))
        token = generate_token()
        await self._execute_db_operation(
            "issue_link_token",
            self.tokens.add(token, account_id, expires_at),
        )
        self._log_operation("Link token issued", account_id=account_id, purged=purged)
        return token, expires_at

    def connect_url(self, token: str) -> str:
        """Deep link that opens the bot with ``/start <token>``."""
        bot_username = get_app_config().application.telegram.bot_username
        return f"https://t.me/{bot_username}?start={token}"

    async def redeem(self, token: str, chat_id: int, username: str | None) -> str | None:
        """
        Redeem a link token and bind ``chat_id`` to its account.

        Returns:
            The linked account id, or None if the token is unknown, used or expired
        """
        account_id = await self._execute_db_operation(
            "redeem_link_token",
            self.tokens.consume(token, utc_now()),
        )
        if account_id is None:
            self._log_debug("Link token rejected", chat_id=chat_id)
            return None

        await self._execute_db_operation(
            "bind_telegram",
            self.accounts.bind_telegram(account_id, chat_id, username),
        )
        self._log_operation("Telegram chat linked", account_id=account_id, chat_id=chat_id)
        return account_id

    async def unbind(self, account_id: str) -> None:
        """Clear the account's chat binding. Idempotent."""
        await self._execute_db_operation(
            "unbind_telegram",
            self.accounts.unbind_telegram(account_id),
        )
        self._log_operation("Telegram chat unlinked", account_id=account_id)
