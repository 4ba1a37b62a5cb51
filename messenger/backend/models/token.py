"""
Single-Use Token Models.

Telegram link tokens and password reset tokens share one shape: an
opaque token, the account it belongs to, an expiry and a used flag.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from messenger.backend.core.utils import utc_now
from messenger.backend.models.base import Base


class SingleUseTokenMixin:
    """Columns shared by all single-use tokens."""

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)


class TelegramLinkToken(SingleUseTokenMixin, Base):
    """Binds a Telegram chat to an account when redeemed via /start."""

    __tablename__ = "telegram_link_tokens"


class PasswordResetToken(SingleUseTokenMixin, Base):
    """Authorizes one password change without the current password."""

    __tablename__ = "password_reset_tokens"
