"""
Telegram Bot Handlers.

Handler Organization:
- common.py: /start (account linking) and /help
- drafts.py: /respond, /improve, /log and the draft buttons
- clients.py: @Name: message logging, /clients, and the plain-text fallback

The clients router holds the catch-all text handler, so it is included last.
"""

from aiogram import Router

from messenger.telegram.handlers.clients import router as clients_router
from messenger.telegram.handlers.common import router as common_router
from messenger.telegram.handlers.drafts import router as drafts_router

__all__ = [
    "get_all_routers",
    "clients_router",
    "common_router",
    "drafts_router",
]


def get_all_routers() -> list[Router]:
    """
    Get all routers to include in the dispatcher, in match order.

    Usage:
        for router in get_all_routers():
            dp.include_router(router)
    """
    return [
        common_router,
        drafts_router,
        clients_router,
    ]
