"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the session configuration forwarded to
the provider, the short-lived credential grant issued by the backend, and the
client events the session sends over the event side-channel.
"""

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from receptionist.config.constants import (
    AUDIO_FORMAT_PCM16,
    CLIENT_AUDIO_APPEND,
    CLIENT_ITEM_CREATE,
    CLIENT_RESPONSE_CANCEL,
    CLIENT_RESPONSE_CREATE,
    CLIENT_SESSION_UPDATE,
)


class TurnDetection(BaseModel):
    """Server-side voice activity detection parameters."""
    type: str = "server_vad"
    threshold: float = Field(0.5, ge=0.0, le=1.0)
    prefix_padding_ms: int = 300
    silence_duration_ms: int = 800


class InputAudioTranscription(BaseModel):
    """Transcription model applied to caller audio."""
    model: str = "whisper-1"


class ToolSchema(BaseModel):
    """A function the model may call."""
    type: Literal["function"] = "function"
    name: str
    description: str
    parameters: Dict[str, Any]


class SessionConfig(BaseModel):
    """Configuration sent as the first message on the event side-channel."""
    modalities: List[str] = Field(default_factory=lambda: ["text", "audio"])
    instructions: str
    voice: str = "shimmer"
    input_audio_format: str = AUDIO_FORMAT_PCM16
    output_audio_format: str = AUDIO_FORMAT_PCM16
    input_audio_transcription: InputAudioTranscription = Field(
        default_factory=InputAudioTranscription
    )
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)
    tools: List[ToolSchema] = Field(default_factory=list)
    tool_choice: str = "auto"
    temperature: float = 0.8
    max_response_output_tokens: int = 200


class ClientSecret(BaseModel):
    """Ephemeral key scoped to a single realtime session."""
    value: str
    expires_at: Optional[int] = None


class RealtimeSessionResponse(BaseModel):
    """Response from the provider's session creation endpoint."""
    id: Optional[str] = None
    client_secret: ClientSecret


class BusinessSummary(BaseModel):
    """What the UI needs to introduce the agent."""
    id: str
    name: str
    agentName: str
    greeting: str


class CredentialGrant(BaseModel):
    """Response of the credential endpoint."""
    client_secret: ClientSecret
    session_config: SessionConfig
    business: Optional[BusinessSummary] = None


class RealtimeErrorDetail(BaseModel):
    """Error body carried by a provider error event."""
    type: Optional[str] = None
    code: Optional[str] = None
    message: str = "Unknown error"
    param: Optional[str] = None


def session_update(config: SessionConfig) -> Dict[str, Any]:
    return {"type": CLIENT_SESSION_UPDATE, "session": config.model_dump()}


def function_call_output(call_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": CLIENT_ITEM_CREATE,
        "item": {
            "type": "function_call_output",
            "call_id": call_id,
            "output": json.dumps(payload),
        },
    }


def user_text_message(text: str) -> Dict[str, Any]:
    return {
        "type": CLIENT_ITEM_CREATE,
        "item": {
            "type": "message",
            "role": "user",
            "content": [{"type": "input_text", "text": text}],
        },
    }


def response_create() -> Dict[str, Any]:
    return {"type": CLIENT_RESPONSE_CREATE}


def response_cancel() -> Dict[str, Any]:
    return {"type": CLIENT_RESPONSE_CANCEL}


def audio_append(audio_b64: str) -> Dict[str, Any]:
    return {"type": CLIENT_AUDIO_APPEND, "audio": audio_b64}
