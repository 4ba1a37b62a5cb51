"""
Common Keyboard Builders.
"""

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from messenger.telegram.callbacks.common import DraftCallback


def get_draft_keyboard() -> InlineKeyboardMarkup:
    """Inline keyboard shown under a draft: log it as sent, or discard it."""
    builder = InlineKeyboardBuilder()
    builder.button(text="✅ Log as sent", callback_data=DraftCallback(action="log"))
    builder.button(text="🗑 Discard", callback_data=DraftCallback(action="discard"))
    builder.adjust(2)
    return builder.as_markup()
