"""
Callback Data Factories.
"""

from messenger.telegram.callbacks.common import DraftCallback

__all__ = ["DraftCallback"]
