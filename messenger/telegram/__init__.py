"""
Telegram Bot Module.

aiogram v3 bridge that maps chat commands onto the same services the HTTP
API uses. Runs in webhook mode inside the FastAPI application, or in
polling mode via ``python run.py --action bot``.

Structure:
    messenger/telegram/
    ├── bot.py               # Bot and dispatcher setup
    ├── webhook.py           # Webhook endpoint for FastAPI
    ├── sessions.py          # Per-chat active client and last draft
    ├── handlers/            # /start, /help, @Name:, /clients, /respond, /improve, /log
    ├── middlewares/         # Logging, database session, account lookup, rate limiting
    ├── keyboards/           # Inline keyboards
    └── callbacks/           # CallbackData factories
"""

from messenger.telegram.bot import create_bot, create_dispatcher, get_bot, get_dispatcher

__all__ = [
    "create_bot",
    "create_dispatcher",
    "get_bot",
    "get_dispatcher",
]
