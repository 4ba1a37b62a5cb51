"""
Message Repository.

Data access for client message threads.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.message import Message
from messenger.backend.repositories.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for Message model."""

    model = Message

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_client(self, client_id: str) -> list[Message]:
        """
        List a client's messages, oldest first.

        Ties on timestamp are broken by id so the order is stable.
        """
        result = await self.session.execute(
            select(Message)
            .where(Message.client_id == client_id)
            .order_by(Message.timestamp, Message.id)
        )
        return list(result.scalars().all())

    async def count_for_client(self, client_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Message).where(Message.client_id == client_id)
        )
        return result.scalar_one()
