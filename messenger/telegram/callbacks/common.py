"""
Common Callback Data.

Typed callback data for inline keyboard buttons.
"""

from aiogram.filters.callback_data import CallbackData


class DraftCallback(CallbackData, prefix="draft"):
    """
    Callback for the buttons under an AI draft.

    Actions:
        log: save the draft as an outbound message
        discard: drop the draft
    """

    action: str
