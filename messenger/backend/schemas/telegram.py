"""
Telegram Link Schemas.
"""

from datetime import datetime

from pydantic import BaseModel


class TelegramConnectResponse(BaseModel):
    """Deep link that binds a chat to the account when opened."""

    url: str
    expires_at: datetime
