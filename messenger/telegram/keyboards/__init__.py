"""
Keyboard Builders.
"""

from messenger.telegram.keyboards.common import get_draft_keyboard

__all__ = ["get_draft_keyboard"]
