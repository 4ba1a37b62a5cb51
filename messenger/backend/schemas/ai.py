"""
AI Schemas.

Request and response bodies for drafting, improving and transcription.
"""

from pydantic import BaseModel, Field


class AIStatusResponse(BaseModel):
    drafting_available: bool
    transcription_available: bool


class RespondRequest(BaseModel):
    client_id: str = Field(..., min_length=1)


class ImproveRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    draft: str = Field(..., min_length=1, max_length=5000)


class DraftResponse(BaseModel):
    text: str


class TranscribeRequest(BaseModel):
    audio: str = Field(..., min_length=1, description="Base64-encoded audio")
    mime_type: str = Field(default="audio/webm", max_length=100)


class TranscriptionResponse(BaseModel):
    text: str
