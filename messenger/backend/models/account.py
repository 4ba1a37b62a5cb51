"""
Account Model.

A photographer's account. Owns clients, messages, saved responses,
usage records and tokens; deleting an account removes all of them.
"""

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messenger.backend.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from messenger.backend.models.client import Client
    from messenger.backend.models.saved_response import SavedResponse

PLAN_TIERS = ("free", "paid", "power")
DEFAULT_TONE = "friendly and casual"


class Account(UUIDMixin, TimestampMixin, Base):
    """
    Account database model.

    Email is stored lower-case. ``telegram_chat_id`` is unique: a chat is
    bound to at most one account at a time.
    """

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(
        String(320),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    specialty: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tone: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_TONE)
    plan: Mapped[str] = mapped_column(String(16), nullable=False, default="free")
    telegram_chat_id: Mapped[int | None] = mapped_column(
        BigInteger,
        unique=True,
        nullable=True,
    )
    telegram_username: Mapped[str | None] = mapped_column(String(255), nullable=True)

    clients: Mapped[list["Client"]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    saved_responses: Mapped[list["SavedResponse"]] = relationship(
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SavedResponse.position",
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, plan={self.plan})>"
