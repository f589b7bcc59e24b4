"""
Appointment records persisted by the booking repository.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Appointment(BaseModel):
    """A booked appointment in business-local wall-clock time."""

    id: str
    business_id: str
    customer_name: str
    customer_phone: str
    service: str
    appointment_time: datetime
    duration_minutes: int = Field(..., gt=0)
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def ends_at(self) -> datetime:
        return self.appointment_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED
