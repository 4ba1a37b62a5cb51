"""
Usage Record Model.

Per-account, per-calendar-month counters for metered operations.
"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from messenger.backend.models.base import Base, TimestampMixin, UUIDMixin


class UsageRecord(UUIDMixin, TimestampMixin, Base):
    """
    Usage record database model.

    One row per (account, month). Rows are created lazily by the usage
    ledger and counters only ever increase.
    """

    __tablename__ = "usage_records"
    __table_args__ = (UniqueConstraint("account_id", "month", name="uq_usage_account_month"),)

    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    ai_respond_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ai_improve_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    transcribe_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<UsageRecord(account_id={self.account_id}, month={self.month})>"
