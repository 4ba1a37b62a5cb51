"""
Settings Schemas.

Profile fields and saved responses. Saved responses are replaced
wholesale on every update.
"""

from pydantic import BaseModel, ConfigDict, Field


class SavedResponseItem(BaseModel):
    """One saved response as submitted and returned."""

    trigger: str = Field(default="", max_length=255)
    title: str = Field(default="", max_length=255)
    text: str = Field(default="", max_length=5000)

    model_config = ConfigDict(from_attributes=True)


class SettingsUpdate(BaseModel):
    """
    Schema for updating settings.

    Omitted profile fields are left unchanged. When ``saved_responses`` is
    present, it replaces the full list.
    """

    name: str | None = Field(default=None, max_length=255)
    specialty: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=5000)
    tone: str | None = Field(default=None, min_length=1, max_length=255)
    saved_responses: list[SavedResponseItem] | None = Field(default=None, max_length=100)

    model_config = ConfigDict(extra="forbid")


class SettingsResponse(BaseModel):
    name: str
    specialty: str
    notes: str
    tone: str
    plan: str
    telegram_username: str | None
    telegram_connected: bool
    saved_responses: list[SavedResponseItem]
