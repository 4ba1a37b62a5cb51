"""
Usage Repository.

Atomic counter operations on per-month usage records.
"""

from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.usage import UsageRecord
from messenger.backend.repositories.base import BaseRepository

COUNTER_COLUMNS = {
    "ai_respond": "ai_respond_count",
    "ai_improve": "ai_improve_count",
    "transcribe": "transcribe_count",
}


class UsageRepository(BaseRepository[UsageRecord]):
    """
    Repository for UsageRecord model.

    Counter updates bypass the ORM identity map; reads select plain
    columns so they always reflect the database.
    """

    model = UsageRecord

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    def _insert(self):
        if self.dialect_name == "postgresql":
            return postgresql.insert(UsageRecord)
        return sqlite.insert(UsageRecord)

    async def ensure_record(self, account_id: str, month: str) -> None:
        """Create the (account, month) row if missing. Never overwrites an existing row."""
        stmt = (
            self._insert()
            .values(
                id=str(uuid4()),
                account_id=account_id,
                month=month,
                ai_respond_count=0,
                ai_improve_count=0,
                transcribe_count=0,
            )
            .on_conflict_do_nothing(index_elements=["account_id", "month"])
        )
        await self.session.execute(stmt)

    async def increment_if_below(
        self,
        account_id: str,
        month: str,
        operation: str,
        limit: int | None,
    ) -> int | None:
        """
        Increment one counter in a single guarded statement.

        ``limit=None`` increments unconditionally.

        Returns:
            The counter value after the increment, or None when the
            counter had already reached ``limit``
        """
        column = getattr(UsageRecord, COUNTER_COLUMNS[operation])
        stmt = (
            update(UsageRecord)
            .where(UsageRecord.account_id == account_id)
            .where(UsageRecord.month == month)
        )
        if limit is not None:
            stmt = stmt.where(column < limit)
        stmt = (
            stmt.values({column: column + 1})
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_counts(self, account_id: str, month: str) -> dict[str, int]:
        """Current counters for the month; zeros when no row exists yet."""
        result = await self.session.execute(
            select(
                UsageRecord.ai_respond_count,
                UsageRecord.ai_improve_count,
                UsageRecord.transcribe_count,
            )
            .where(UsageRecord.account_id == account_id)
            .where(UsageRecord.month == month)
        )
        row = result.one_or_none()
        if row is None:
            return {operation: 0 for operation in COUNTER_COLUMNS}
        return {
            "ai_respond": row.ai_respond_count,
            "ai_improve": row.ai_improve_count,
            "transcribe": row.transcribe_count,
        }
