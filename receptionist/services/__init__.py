"""
Services module for the backend collaborators of a voice session.

Key components:
- prompts: Deterministic system prompt rendering for a business.
- tools: Tool JSON-schemas offered to the model and their argument models.
- availability: Slot computation honoring opening hours and existing bookings.
- repository: Appointment repository interface and in-memory implementation.
- booking: The actions behind the tools (availability, booking, cancellation,
  business info).
- notifications: Telegram notifications for bookings and cancellations.
- credentials: Ephemeral provider credentials and session configuration.

Usage examples:
```python
from receptionist.config.businesses import get_business
from receptionist.services.booking import BookingService
from receptionist.services.repository import InMemoryAppointmentRepository

service = BookingService(InMemoryAppointmentRepository())
result = await service.execute(
    get_business("barber"), "check_availability", {"date": "2024-06-10"}
)
print(result["message"])
```
"""

# Services module initialization
