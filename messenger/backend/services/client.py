"""
Client Service.

Business logic for a photographer's clients. All lookups are scoped to
the calling account; another account's client is reported as not found.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.account import Account
from messenger.backend.models.client import Client
from messenger.backend.repositories.client import ClientRepository
from messenger.backend.schemas.client import ClientCreate, ClientUpdate
from messenger.backend.services.base import BaseService
from messenger.backend.services.usage import UsageDecision, UsageLedger


class ClientService(BaseService):
    """Service for client business logic."""

    def __init__(self, session: AsyncSession, ledger: UsageLedger | None = None) -> None:
        super().__init__(session)
        self.repo = ClientRepository(session)
        self.ledger = ledger or UsageLedger(session)

    async def list_clients(self, account: Account) -> list[Client]:
        return await self.repo.list_for_account(account.id)

    async def get_client(self, account: Account, client_id: str) -> Client:
        """
        Get one of the account's clients.

        Raises:
            NotFoundError: If the client does not exist or is not owned by the account
        """
        return await self.repo.get_owned(account.id, client_id)

    async def create_client(
        self,
        account: Account,
        data: ClientCreate,
    ) -> tuple[Client | None, UsageDecision]:
        """
        Create a client if the plan's client ceiling allows it.

        Returns:
            Tuple of (client or None when denied, limit decision)
        """
        decision = await self.ledger.check_client_limit(account)
        if not decision.allowed:
            return None, decision

        client = await self._execute_db_operation(
            "create_client",
            self.repo.create(account_id=account.id, name=data.name, notes=data.notes),
        )
        self._log_operation("Client created", account_id=account.id, client_id=client.id)
        return client, decision

    async def find_or_create_by_name(
        self,
        account: Account,
        name: str,
    ) -> tuple[Client | None, UsageDecision | None]:
        """
        Resolve a client by name, creating it when no case-insensitive match exists.

        Returns:
            Tuple of (client, None) when found; the result of ``create_client``
            when a new client had to be created
        """
        existing = await self.repo.find_by_name(account.id, name)
        if existing is not None:
            return existing, None
        return await self.create_client(account, ClientCreate(name=name))

    async def update_client(self, account: Account, client_id: str, data: ClientUpdate) -> Client:
        """
        Update an owned client.

        Raises:
            NotFoundError: If the client does not exist or is not owned by the account
        """
        client = await self.repo.get_owned(account.id, client_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return client

        self._log_operation("Updating client", client_id=client.id, fields=list(update_data))
        return await self._execute_db_operation(
            "update_client",
            self.repo.update_instance(client, **update_data),
        )

    async def delete_client(self, account: Account, client_id: str) -> None:
        """Delete an owned client and its messages."""
        client = await self.repo.get_owned(account.id, client_id)
        self._log_operation("Deleting client", client_id=client.id)
        await self._execute_db_operation("delete_client", self.repo.delete_instance(client))
