"""
Pydantic models for the backend HTTP API.

This module defines the request and response bodies of the credential and
tool execution endpoints used by voice sessions.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class SessionRequest(BaseModel):
    """Body of POST /api/realtime/session."""

    persona: Optional[str] = Field(None, description="Persona key; defaults to the demo salon")

    @field_validator("persona")
    def normalize_persona(cls, v):
        """Treat blank persona keys as missing."""
        if v is not None:
            v = v.strip().lower()
        return v or None


class FunctionRequest(BaseModel):
    """Body of POST /api/realtime/function."""

    persona: Optional[str] = Field(None, description="Persona key of the calling session")
    functionName: str = Field(..., description="Tool name emitted by the model")
    functionArgs: Dict[str, Any] = Field(default_factory=dict, description="Decoded tool arguments")

    @field_validator("functionArgs", mode="before")
    def default_args(cls, v):
        """Tools without arguments may be sent with null."""
        return {} if v is None else v


class FunctionResponse(BaseModel):
    """Successful tool execution; ``result`` follows the tool's result shape."""

    result: Dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
