"""
Saved Response Model.

Reusable reply snippets kept in account settings.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messenger.backend.models.base import Base, UUIDMixin

if TYPE_CHECKING:
    from messenger.backend.models.account import Account


class SavedResponse(UUIDMixin, Base):
    """Saved response database model. ``position`` preserves submitted order."""

    __tablename__ = "saved_responses"

    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trigger: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    account: Mapped["Account"] = relationship(back_populates="saved_responses")
