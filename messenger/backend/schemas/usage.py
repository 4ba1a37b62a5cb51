"""
Usage Schemas.
"""

from datetime import datetime

from pydantic import BaseModel


class UsageCounter(BaseModel):
    """One metered counter. ``limit`` is None when the plan is unlimited."""

    used: int
    limit: int | None


class UsageResponse(BaseModel):
    plan: str
    month: str
    reset_at: datetime
    ai_respond: UsageCounter
    ai_improve: UsageCounter
    transcribe: UsageCounter
    clients: UsageCounter
