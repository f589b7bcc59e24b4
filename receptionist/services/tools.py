"""
Tool definitions the realtime model may call, and their argument models.

The JSON schemas are forwarded to the provider inside the session
configuration; the pydantic models validate the arguments the provider sends
back before any backend action runs.
"""

from typing import Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field, field_validator

from receptionist.config.constants import (
    TOOL_BOOK_APPOINTMENT,
    TOOL_CANCEL_APPOINTMENT,
    TOOL_CHECK_AVAILABILITY,
    TOOL_GET_BUSINESS_INFO,
)
from receptionist.models.realtime_schemas import ToolSchema

VOICE_AGENT_FUNCTIONS: List[ToolSchema] = [
    ToolSchema(
        name=TOOL_CHECK_AVAILABILITY,
        description=(
            "Check available appointment slots for a specific date. "
            "Call this when customer asks about availability or wants to book."
        ),
        parameters={
            "type": "object",
            "properties": {
                "date": {
                    "type": "string",
                    "description": "The date to check availability for in YYYY-MM-DD format",
                },
                "service": {
                    "type": "string",
                    "description": "Optional: The service name to check duration for",
                },
            },
            "required": ["date"],
        },
    ),
    ToolSchema(
        name=TOOL_BOOK_APPOINTMENT,
        description=(
            "Book a new appointment after customer confirms all details. Only call "
            "after getting customer name, phone, service, and confirmed date/time."
        ),
        parameters={
            "type": "object",
            "properties": {
                "customer_name": {"type": "string", "description": "Full name of the customer"},
                "customer_phone": {
                    "type": "string",
                    "description": "Customer's phone number with country code",
                },
                "service": {
                    "type": "string",
                    "description": "The service being booked (e.g., Haircut, Facial)",
                },
                "date_time": {
                    "type": "string",
                    "description": "Appointment date and time in ISO 8601 format",
                },
                "notes": {"type": "string", "description": "Optional notes or special requests"},
            },
            "required": ["customer_name", "customer_phone", "service", "date_time"],
        },
    ),
    ToolSchema(
        name=TOOL_CANCEL_APPOINTMENT,
        description=(
            "Cancel an existing appointment. Ask for phone number and appointment "
            "time to identify."
        ),
        parameters={
            "type": "object",
            "properties": {
                "customer_phone": {
                    "type": "string",
                    "description": "Customer's phone number to look up appointment",
                },
                "appointment_date_time": {
                    "type": "string",
                    "description": "The date and time of appointment to cancel",
                },
            },
            "required": ["customer_phone"],
        },
    ),
    ToolSchema(
        name=TOOL_GET_BUSINESS_INFO,
        description="Get information about business hours, services, or location when customer asks.",
        parameters={
            "type": "object",
            "properties": {
                "info_type": {
                    "type": "string",
                    "enum": ["hours", "services", "location", "prices"],
                    "description": "What information the customer is asking about",
                }
            },
            "required": ["info_type"],
        },
    ),
]


class CheckAvailabilityArgs(BaseModel):
    date: Optional[str] = None
    service: Optional[str] = None


class BookAppointmentArgs(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    service: str = Field(..., min_length=1)
    date_time: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("customer_name", "customer_phone", "service")
    def strip_text(cls, v):
        """Trim whitespace and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be blank")
        return v


class CancelAppointmentArgs(BaseModel):
    customer_phone: str = Field(..., min_length=1)
    appointment_date_time: Optional[str] = None


class BusinessInfoArgs(BaseModel):
    info_type: Literal["hours", "services", "location", "prices"]


TOOL_ARGUMENT_MODELS: Dict[str, Type[BaseModel]] = {
    TOOL_CHECK_AVAILABILITY: CheckAvailabilityArgs,
    TOOL_BOOK_APPOINTMENT: BookAppointmentArgs,
    TOOL_CANCEL_APPOINTMENT: CancelAppointmentArgs,
    TOOL_GET_BUSINESS_INFO: BusinessInfoArgs,
}
