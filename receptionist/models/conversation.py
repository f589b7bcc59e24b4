"""
Conversation state models for a realtime voice session.

This module provides the status enum driven by the event stream interpreter,
the transcript entries shown to the caller, and the tool call structures that
flow between the provider and the tool dispatcher.
"""

import json
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConversationStatus(str, Enum):
    """Progress of a voice session."""
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    ERROR = "error"
    DISCONNECTED = "disconnected"

    @property
    def is_terminal(self) -> bool:
        return self in (ConversationStatus.ERROR, ConversationStatus.DISCONNECTED)

    @property
    def is_active(self) -> bool:
        return self not in (
            ConversationStatus.IDLE,
            ConversationStatus.ERROR,
            ConversationStatus.DISCONNECTED,
        )


class Speaker(str, Enum):
    """Who produced a transcript line."""
    USER = "user"
    AGENT = "agent"


class TranscriptEntry(BaseModel):
    """One transcript line; immutable once final."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"msg_{uuid.uuid4().hex[:12]}")
    speaker: Speaker
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    isFinal: bool = True


class ToolInvocation(BaseModel):
    """A completed tool call emitted by the provider."""

    model_config = ConfigDict(frozen=True)

    callId: str
    name: str
    argumentsJson: str = "{}"

    def arguments(self) -> Dict[str, Any]:
        """Decode the JSON arguments; raises ValueError on malformed input."""
        if not self.argumentsJson:
            return {}
        decoded = json.loads(self.argumentsJson)
        if not isinstance(decoded, dict):
            raise ValueError("Tool arguments must be a JSON object")
        return decoded


class ToolResult(BaseModel):
    """Result returned into the conversation for one tool call."""

    model_config = ConfigDict(frozen=True)

    callId: str
    payload: Dict[str, Any]

    @property
    def is_error(self) -> bool:
        return "error" in self.payload


class ConversationView(BaseModel):
    """Read-only projection of a session for the UI."""

    status: ConversationStatus
    entries: List[TranscriptEntry]
    audioLevel: float = Field(0.0, ge=0.0, le=1.0)
    muted: bool = False
    lastError: Optional[str] = None

    @property
    def final_entries(self) -> List[TranscriptEntry]:
        return [entry for entry in self.entries if entry.isFinal]
