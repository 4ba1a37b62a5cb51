"""
Saved Response Repository.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.saved_response import SavedResponse
from messenger.backend.repositories.base import BaseRepository


class SavedResponseRepository(BaseRepository[SavedResponse]):
    """Repository for SavedResponse model."""

    model = SavedResponse

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_account(self, account_id: str) -> list[SavedResponse]:
        result = await self.session.execute(
            select(SavedResponse)
            .where(SavedResponse.account_id == account_id)
            .order_by(SavedResponse.position)
        )
        return list(result.scalars().all())

    async def replace_for_account(
        self,
        account_id: str,
        items: list[dict[str, str]],
    ) -> list[SavedResponse]:
        """Delete every saved response of the account and insert ``items`` in order."""
        await self.session.execute(
            delete(SavedResponse)
            .where(SavedResponse.account_id == account_id)
            .execution_options(synchronize_session=False)
        )
        created = [
            SavedResponse(account_id=account_id, position=index, **item)
            for index, item in enumerate(items)
        ]
        self.session.add_all(created)
        await self.session.flush()
        return created
