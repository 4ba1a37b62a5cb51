"""
Photo Client Messenger.

- backend/: Accounts, clients, messages, usage ledger, AI drafting, HTTP API
- telegram/: Telegram command bridge (aiogram v3)
"""
