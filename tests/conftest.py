import logging
from datetime import date, datetime

import pytest

from receptionist.config.businesses import get_business
from receptionist.models.appointments import Appointment
from receptionist.services.booking import BookingService
from receptionist.services.repository import InMemoryAppointmentRepository


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def barber():
    return get_business("barber")


@pytest.fixture
def dentist():
    return get_business("dentist")


@pytest.fixture
def repository():
    return InMemoryAppointmentRepository()


class RecordingNotifier:
    """Notifier double that records what would have been sent."""

    configured = True

    def __init__(self):
        self.bookings = []
        self.cancellations = []

    async def notify_booking(self, chat_id, appointment):
        self.bookings.append((chat_id, appointment))
        return True

    async def notify_cancellation(self, chat_id, appointment):
        self.cancellations.append((chat_id, appointment))
        return True


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def booking(repository, notifier):
    # Fixed clock: "tomorrow" is Monday 2024-06-10
    return BookingService(repository, notifier, today=lambda: date(2024, 6, 9))


@pytest.fixture
def make_appointment():
    """Build appointments without going through the booking flow."""
    def factory(business, start: datetime, minutes: int = 30, phone: str = "9876543210", **kwargs):
        return Appointment(
            id=InMemoryAppointmentRepository.new_id(),
            business_id=business.id,
            customer_name=kwargs.pop("customer_name", "Amit"),
            customer_phone=phone,
            service=kwargs.pop("service", "Haircut"),
            appointment_time=start,
            duration_minutes=minutes,
            **kwargs,
        )
    return factory
