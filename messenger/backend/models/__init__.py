"""
Database models.

Importing this package registers every table on ``Base.metadata``.
"""

from messenger.backend.models.account import Account
from messenger.backend.models.base import Base
from messenger.backend.models.client import Client
from messenger.backend.models.message import Message
from messenger.backend.models.saved_response import SavedResponse
from messenger.backend.models.token import PasswordResetToken, TelegramLinkToken
from messenger.backend.models.usage import UsageRecord

__all__ = [
    "Account",
    "Base",
    "Client",
    "Message",
    "PasswordResetToken",
    "SavedResponse",
    "TelegramLinkToken",
    "UsageRecord",
]
