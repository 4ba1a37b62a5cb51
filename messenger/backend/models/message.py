"""
Message Model.

One message in a client thread. Messages are append-only.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messenger.backend.core.utils import utc_now
from messenger.backend.models.base import Base, UUIDMixin

if TYPE_CHECKING:
    from messenger.backend.models.client import Client

INBOUND = "inbound"
OUTBOUND = "outbound"
DIRECTIONS = (INBOUND, OUTBOUND)


class Message(UUIDMixin, Base):
    """
    Message database model.

    ``inbound`` messages come from the client, ``outbound`` from the
    photographer.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_client_timestamp", "client_id", "timestamp"),)

    client_id: Mapped[str] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    direction: Mapped[str] = mapped_column(String(16), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    client: Mapped["Client"] = relationship(back_populates="messages")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, direction={self.direction})>"
