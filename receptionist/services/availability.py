"""
Deterministic slot computation for a business day.

Candidate starts are generated every SLOT_STEP_MINUTES from opening time while
the whole service fits before closing. A candidate is dropped when its
half-open interval [start, start + duration) intersects any active
appointment's interval, so back-to-back bookings remain possible.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from receptionist.config.constants import SLOT_PREVIEW_COUNT, SLOT_STEP_MINUTES
from receptionist.models.appointments import Appointment
from receptionist.models.business import BusinessContext


class Availability(BaseModel):
    """Free slots for one date, with a natural-language summary."""
    slots: List[str] = Field(default_factory=list)
    message: str

    def to_result(self) -> dict:
        return {"slots": list(self.slots), "message": self.message}


def format_slot(moment: datetime) -> str:
    """Format a datetime as a 12-hour clock string such as '9:00 AM'."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def resolve_date(value: Optional[str], today: date) -> date:
    """Resolve 'today', 'tomorrow', an empty value or an ISO date string."""
    text = (value or "").strip().lower()
    if not text or "tomorrow" in text:
        return today + timedelta(days=1)
    if "today" in text:
        return today
    return date.fromisoformat(text[:10])


def parse_date_time(value: str) -> datetime:
    """Parse an ISO 8601 date-time into business-local wall-clock time."""
    moment = datetime.fromisoformat(value.strip())
    # Offsets are ignored; the caller speaks in the business's local time
    return moment.replace(tzinfo=None)


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    return start < other_end and other_start < end


def compute_slots(
    business: BusinessContext,
    day: date,
    duration: int,
    appointments: Iterable[Appointment],
) -> List[datetime]:
    """Return free slot start times for a day in chronological order."""
    hours = business.hours_for(day.strftime("%A"))
    if hours is None or not hours.isOpen:
        return []

    opens = datetime.combine(day, hours.opens_at)
    closes = datetime.combine(day, hours.closes_at)
    length = timedelta(minutes=duration)
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    busy = [
        (apt.appointment_time, apt.ends_at)
        for apt in appointments
        if apt.is_active and apt.appointment_time.date() == day
    ]

    slots = []
    current = opens
    while current + length <= closes:
        end = current + length
        if not any(overlaps(current, end, b_start, b_end) for b_start, b_end in busy):
            slots.append(current)
        current += step
    return slots


def check_availability(
    business: BusinessContext,
    day: date,
    service: Optional[str],
    appointments: Iterable[Appointment],
) -> Availability:
    """Compute availability for a date, honoring opening hours and bookings."""
    weekday = day.strftime("%A").lower()
    hours = business.hours_for(weekday)
    if hours is None or not hours.isOpen:
        return Availability(slots=[], message=f"Sorry, we are closed on {day:%A}")

    duration = business.service_duration(service)
    slots = [format_slot(s) for s in compute_slots(business, day, duration, appointments)]
    if not slots:
        return Availability(slots=[], message="Sorry, no slots available for this date")

    preview = ", ".join(slots[:SLOT_PREVIEW_COUNT])
    more = " and more" if len(slots) > SLOT_PREVIEW_COUNT else ""
    return Availability(slots=slots, message=f"Available slots: {preview}{more}")
