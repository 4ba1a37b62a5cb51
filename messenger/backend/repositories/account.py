"""
Account Repository.

Data access for accounts, including the Telegram chat binding.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.account import Account
from messenger.backend.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Repository for Account model."""

    model = Account

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_email(self, email: str) -> Account | None:
        """Get an account by email. ``email`` must already be normalized."""
        result = await self.session.execute(
            select(Account).where(Account.email == email)
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(Account.id).where(Account.email == email)
        )
        return result.scalar_one_or_none() is not None

    async def get_by_telegram_chat_id(self, chat_id: int) -> Account | None:
        """Get the account bound to a Telegram chat, if any."""
        result = await self.session.execute(
            select(Account).where(Account.telegram_chat_id == chat_id)
        )
        return result.scalar_one_or_none()

    async def bind_telegram(self, account_id: str, chat_id: int, username: str | None) -> None:
        """
        Bind a chat to an account.

        Any other account currently holding the chat id is unbound first,
        keeping ``telegram_chat_id`` unique.
        """
        await self.session.execute(
            update(Account)
            .where(Account.telegram_chat_id == chat_id)
            .where(Account.id != account_id)
            .values(telegram_chat_id=None, telegram_username=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(telegram_chat_id=chat_id, telegram_username=username)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()

    async def unbind_telegram(self, account_id: str) -> None:
        """Clear the Telegram binding. Idempotent."""
        await self.session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(telegram_chat_id=None, telegram_username=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
