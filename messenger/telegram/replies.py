"""
Bot Reply Texts.

Reply strings shared by the handlers. Messages are sent with HTML parse
mode, so anything user-provided must go through ``html.quote``.
"""

from aiogram import html

from messenger.backend.services.usage import UsageDecision

HELP_TEXT = (
    "<b>Commands</b>\n\n"
    "@ClientName: their message - Log a client message\n"
    "/respond - Draft a reply for the active client\n"
    "/improve &lt;draft&gt; - Improve your own draft\n"
    "/log - Save the last draft as sent\n"
    "/clients - List your clients\n"
    "/help - Show this help"
)

USAGE_HINT = (
    "To log a client message use:\n"
    "@ClientName: their message\n\n"
    "Or type /help for all commands."
)

NO_ACTIVE_CLIENT = "No active client. Send @ClientName: their message first."
ACTIVE_CLIENT_GONE = "Active client not found. Send @ClientName: their message to pick one."
NOTHING_TO_LOG = "Nothing to log. Use /respond or /improve first."
AI_UNAVAILABLE = "AI drafting isn't configured on this server."
IMPROVE_USAGE = "Usage: /improve your draft text here"
LINK_INVALID = "This link is invalid or has expired. Create a new one in Settings."
NO_CLIENTS = "No clients yet.\nStart with: @ClientName: their message"


def limit_reply(decision: UsageDecision) -> str:
    """Chat rendering of a plan limit denial."""
    text = f"⚠️ {html.quote(decision.message)}"
    if decision.limit_type in ("ai_respond", "ai_improve", "transcribe"):
        text += f"\nCredits reset on {decision.reset_at:%B} {decision.reset_at.day}."
    return text


def linked_reply(email: str) -> str:
    return f"✅ This chat is now linked to <b>{html.quote(email)}</b>.\n\n{HELP_TEXT}"


def client_logged_reply(client_name: str, is_new: bool) -> str:
    name = html.quote(client_name)
    prefix = f"Created new client: {name}" if is_new else f"Logged for {name}"
    return f"{prefix} ✓\n\nUse /respond to draft a reply, or /improve &lt;your draft&gt;"


def draft_reply(draft: str, improved: bool = False) -> str:
    label = "Improved" if improved else "Draft"
    return f"<b>{label}:</b>\n\n{html.quote(draft)}"


def clients_reply(names: list[str]) -> str:
    lines = "\n".join(f"{i}. {html.quote(name)}" for i, name in enumerate(names, start=1))
    return f"<b>Your clients:</b>\n\n{lines}"
