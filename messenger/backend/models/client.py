"""
Client Model.

A photographer's client. Clients belong to exactly one account.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messenger.backend.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from messenger.backend.models.account import Account
    from messenger.backend.models.message import Message


class Client(UUIDMixin, TimestampMixin, Base):
    """Client database model."""

    __tablename__ = "clients"

    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    account: Mapped["Account"] = relationship(back_populates="clients")
    messages: Mapped[list["Message"]] = relationship(
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, account_id={self.account_id})>"
