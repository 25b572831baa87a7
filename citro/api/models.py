"""
Pydantic models for API request/response types.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Voice Models
# =============================================================================


class VoiceProcessRequest(BaseModel):
    """Body of POST /api/voice/process."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transcript: str = Field(..., description="Text from the browser's speech recognizer")
    current_page: str | None = Field(None, alias="currentPage", description="Route the user is on")
    cart_session: str | None = Field(None, alias="cartSession", description="Anonymous cart key")

    @field_validator("transcript")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Transcript is required")
        return v


class VoiceResultModel(BaseModel):
    """What the assistant says and what the page should do."""

    reply: str = Field(..., description="Natural-language reply")
    action: str | None = Field(None, description="Directive for the client, or null")
    data: Any = Field(None, description="Payload for the directive")
    intent: str = Field(..., description="Classified intent")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Classifier confidence")
    speak_text: str | None = Field(None, description="Shorter text for speech synthesis")


class VoiceProcessResponse(BaseModel):
    success: bool = True
    data: VoiceResultModel


class VoiceCommandsResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Common Models
# =============================================================================


class ErrorResponse(BaseModel):
    """Error body for every non-2xx response."""

    success: bool = False
    message: str


class HealthCheck(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Overall system status")
    version: str = Field(default="0.1.0", description="API version")
    timestamp: datetime = Field(default_factory=datetime.now, description="Check timestamp")
    services: dict[str, str] = Field(default_factory=dict, description="Individual service statuses")
