"""
Exception taxonomy for voice sessions and backend tool execution.

Everything except ToolExecutionError ends a session: the session moves to the
error (or disconnected) state, releases its resources and reports the message
through its error callback. ToolExecutionError is recovered by the tool
dispatcher and returned to the model as a failure payload.
"""

from typing import Any, Dict, Optional


class VoiceSessionError(Exception):
    """Base exception for all voice session errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.__class__.__name__, "message": self.message, **self.details}


class CredentialError(VoiceSessionError):
    """The short-lived access credential could not be obtained."""


class MediaAccessError(VoiceSessionError):
    """The microphone was denied or is unavailable."""


class SignalingError(VoiceSessionError):
    """The handshake with the provider failed or timed out."""


class ToolExecutionError(VoiceSessionError):
    """A backend action requested by the model failed."""


class ProviderError(VoiceSessionError):
    """The provider reported an error on the event stream."""


class TransportClosed(VoiceSessionError):
    """The transport closed without the session asking for it."""
