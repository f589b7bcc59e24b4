"""
Appointment persistence.

The booking service depends on the AppointmentRepository interface only; the
in-memory implementation is an explicit, injectable instance rather than
process-wide state.
"""

import asyncio
import re
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, List, Optional

from receptionist.models.appointments import Appointment, AppointmentStatus


def normalize_phone(phone: str) -> str:
    """Keep the last ten digits so '+91 98765 43210' matches '9876543210'."""
    return re.sub(r"\D", "", phone or "")[-10:]


class AppointmentRepository(ABC):
    """Interface for appointment data access."""

    @abstractmethod
    async def create(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment and return the stored record."""

    @abstractmethod
    async def list_active(self, business_id: str, day: date) -> List[Appointment]:
        """Non-cancelled appointments for a business on a date, ordered by time."""

    @abstractmethod
    async def find_active(
        self, business_id: str, customer_phone: str, at: Optional[datetime] = None
    ) -> List[Appointment]:
        """Confirmed appointments matching a customer phone and optional start time."""

    @abstractmethod
    async def update_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Optional[Appointment]:
        """Change an appointment's status; returns None when it does not exist."""

    @staticmethod
    def new_id() -> str:
        return f"apt_{uuid.uuid4().hex[:12]}"


class InMemoryAppointmentRepository(AppointmentRepository):
    """Appointment repository backed by a dictionary."""

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._lock = asyncio.Lock()

    async def create(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            self._appointments[appointment.id] = appointment
        return appointment

    async def list_active(self, business_id: str, day: date) -> List[Appointment]:
        async with self._lock:
            matches = [
                apt for apt in self._appointments.values()
                if apt.business_id == business_id
                and apt.is_active
                and apt.appointment_time.date() == day
            ]
        return sorted(matches, key=lambda apt: apt.appointment_time)

    async def find_active(
        self, business_id: str, customer_phone: str, at: Optional[datetime] = None
    ) -> List[Appointment]:
        phone = normalize_phone(customer_phone)
        async with self._lock:
            return [
                apt for apt in self._appointments.values()
                if apt.business_id == business_id
                and apt.status == AppointmentStatus.CONFIRMED
                and normalize_phone(apt.customer_phone) == phone
                and (at is None or apt.appointment_time == at)
            ]

    async def update_status(
        self, appointment_id: str, status: AppointmentStatus
    ) -> Optional[Appointment]:
        async with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                return None
            updated = current.model_copy(update={"status": status})
            self._appointments[appointment_id] = updated
            return updated
