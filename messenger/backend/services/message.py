"""
Message Service.

Appends to and reads client message threads.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.utils import utc_now
from messenger.backend.models.account import Account
from messenger.backend.models.message import Message
from messenger.backend.repositories.client import ClientRepository
from messenger.backend.repositories.message import MessageRepository
from messenger.backend.services.base import BaseService
from messenger.backend.services.usage import UsageDecision, UsageLedger


class MessageService(BaseService):
    """Service for message threads."""

    def __init__(self, session: AsyncSession, ledger: UsageLedger | None = None) -> None:
        super().__init__(session)
        self.repo = MessageRepository(session)
        self.clients = ClientRepository(session)
        self.ledger = ledger or UsageLedger(session)

    async def list_messages(self, account: Account, client_id: str) -> list[Message]:
        """
        List a client's thread, oldest first.

        Raises:
            NotFoundError: If the client does not exist or is not owned by the account
        """
        client = await self.clients.get_owned(account.id, client_id)
        return await self.repo.list_for_client(client.id)

    async def add_message(
        self,
        account: Account,
        client_id: str,
        direction: str,
        text: str,
    ) -> tuple[Message | None, UsageDecision]:
        """
        Append a message if the messages-per-client ceiling allows it.

        Raises:
            NotFoundError: If the client does not exist or is not owned by the account

        Returns:
            Tuple of (message or None when denied, limit decision)
        """
        client = await self.clients.get_owned(account.id, client_id)
        decision = await self.ledger.check_message_limit(account, client.id)
        if not decision.allowed:
            return None, decision

        message = await self._execute_db_operation(
            "add_message",
            self.repo.create(
                client_id=client.id,
                direction=direction,
                text=text,
                timestamp=utc_now(),
            ),
        )
        self._log_debug(
            "Message logged",
            client_id=client.id,
            direction=direction,
            length=len(text),
        )
        return message, decision
