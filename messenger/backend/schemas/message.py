"""
Message Schemas.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Schema for appending a message to a client thread."""

    client_id: str = Field(..., min_length=1)
    direction: Literal["inbound", "outbound"]
    text: str = Field(..., min_length=1, max_length=20000)


class MessageResponse(BaseModel):
    """Schema for message in API responses."""

    id: str
    client_id: str
    direction: str
    text: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
