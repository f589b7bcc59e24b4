"""
Business context models used to parameterize the voice agent.

A BusinessContext is an immutable snapshot: the session, the prompt renderer and
the booking service only ever read it, so one instance can back any number of
concurrently displayed personas.
"""

from datetime import time
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from receptionist.config.constants import DEFAULT_SERVICE_DURATION, WEEKDAYS


class AgentPersona(BaseModel):
    """How the agent presents itself on a call."""

    model_config = ConfigDict(frozen=True)

    name: str
    language: str = Field("en", description="en, hi or hi-en (Hinglish)")
    tone: str = "friendly"
    greeting: str


class Service(BaseModel):
    """A bookable service offered by the business."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration: int = Field(DEFAULT_SERVICE_DURATION, gt=0, description="Minutes")
    price: int = Field(..., ge=0, description="Price in rupees")
    description: str = ""


class DayHours(BaseModel):
    """Opening hours for a single weekday, as HH:MM strings."""

    model_config = ConfigDict(frozen=True)

    open: str
    close: str
    isOpen: bool = True

    @field_validator("open", "close")
    def validate_clock(cls, v):
        """Validate that the value is an HH:MM clock time."""
        time.fromisoformat(v)
        return v

    @property
    def opens_at(self) -> time:
        return time.fromisoformat(self.open)

    @property
    def closes_at(self) -> time:
        return time.fromisoformat(self.close)


class BusinessContext(BaseModel):
    """Configuration snapshot for one business."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    agentPersona: AgentPersona
    services: List[Service] = Field(default_factory=list)
    openingHours: Dict[str, DayHours]
    address: str = ""
    telegramChatId: Optional[str] = None

    @field_validator("openingHours")
    def validate_weekdays(cls, v):
        """Validate that opening hours are keyed by lowercase weekday names."""
        unknown = [day for day in v if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday keys in opening hours: {unknown}")
        return v

    def hours_for(self, weekday: str) -> Optional[DayHours]:
        """Return the hours for a weekday name, or None when not configured."""
        return self.openingHours.get(weekday.lower())

    def find_service(self, name: Optional[str]) -> Optional[Service]:
        """Case-insensitive service lookup by name."""
        if not name:
            return None
        wanted = name.strip().lower()
        for service in self.services:
            if service.name.lower() == wanted:
                return service
        return None

    def service_duration(self, name: Optional[str]) -> int:
        """Duration in minutes for a service, falling back to the default."""
        service = self.find_service(name)
        return service.duration if service else DEFAULT_SERVICE_DURATION
