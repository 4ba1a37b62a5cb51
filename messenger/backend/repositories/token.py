"""
Single-Use Token Repositories.

Issue, garbage-collect and atomically redeem link and reset tokens.
"""

from datetime import datetime
from typing import TypeVar

from sqlalchemy import delete, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.token import PasswordResetToken, TelegramLinkToken
from messenger.backend.repositories.base import BaseRepository

TokenType = TypeVar("TokenType", TelegramLinkToken, PasswordResetToken)


class SingleUseTokenRepository(BaseRepository[TokenType]):
    """Shared operations for token tables. Subclasses set ``model``."""

    async def purge_stale(self, now: datetime) -> int:
        """Delete expired and used tokens for all accounts. Returns rows removed."""
        result = await self.session.execute(
            delete(self.model)
            .where(or_(self.model.expires_at <= now, self.model.used == True))  # noqa: E712
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def add(self, token: str, account_id: str, expires_at: datetime) -> TokenType:
        return await self.create(token=token, account_id=account_id, expires_at=expires_at)

    async def consume(self, token: str, now: datetime) -> str | None:
        """
        Mark a token used if it is unused and unexpired, in one statement.

        Of two concurrent calls with the same token only one gets a row back.

        Returns:
            The owning account id, or None if the token is unknown, used or expired
        """
        result = await self.session.execute(
            update(self.model)
            .where(self.model.token == token)
            .where(self.model.used == False)  # noqa: E712
            .where(self.model.expires_at > now)
            .values(used=True)
            .returning(self.model.account_id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()


class TelegramLinkTokenRepository(SingleUseTokenRepository[TelegramLinkToken]):
    model = TelegramLinkToken

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)


class PasswordResetTokenRepository(SingleUseTokenRepository[PasswordResetToken]):
    model = PasswordResetToken

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
