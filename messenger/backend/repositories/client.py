"""
Client Repository.

Data access for clients. Every query is scoped to the owning account.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.exceptions import NotFoundError
from messenger.backend.models.client import Client
from messenger.backend.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """Repository for Client model."""

    model = Client

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_account(self, account_id: str) -> list[Client]:
        """List an account's clients in creation order."""
        result = await self.session.execute(
            select(Client)
            .where(Client.account_id == account_id)
            .order_by(Client.created_at, Client.id)
        )
        return list(result.scalars().all())

    async def get_owned(self, account_id: str, client_id: str) -> Client:
        """
        Get a client belonging to ``account_id``.

        Raises:
            NotFoundError: If the client does not exist or belongs to another account
        """
        result = await self.session.execute(
            select(Client)
            .where(Client.id == str(client_id))
            .where(Client.account_id == account_id)
        )
        client = result.scalar_one_or_none()
        if client is None:
            raise NotFoundError("Client not found")
        return client

    async def find_by_name(self, account_id: str, name: str) -> Client | None:
        """Find a client by name, case-insensitive and whitespace-trimmed."""
        wanted = name.strip().lower()
        result = await self.session.execute(
            select(Client)
            .where(Client.account_id == account_id)
            .where(func.lower(func.trim(Client.name)) == wanted)
            .order_by(Client.created_at, Client.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_for_account(self, account_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Client).where(Client.account_id == account_id)
        )
        return result.scalar_one()
