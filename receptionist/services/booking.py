"""
Backend actions behind the agent's tools.

BookingService implements check_availability, book_appointment,
cancel_appointment and get_business_info against an injected appointment
repository and notifier. Results use the exact shapes the model is told about
in the tool schemas.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from receptionist.config.constants import (
    ALTERNATIVES_PREVIEW_COUNT,
    LOGGER_NAME,
    TOOL_BOOK_APPOINTMENT,
    TOOL_CANCEL_APPOINTMENT,
    TOOL_CHECK_AVAILABILITY,
    TOOL_GET_BUSINESS_INFO,
    WEEKDAYS,
)
from receptionist.exceptions import ToolExecutionError
from receptionist.models.appointments import Appointment, AppointmentStatus
from receptionist.models.business import BusinessContext
from receptionist.services.availability import (
    check_availability,
    format_slot,
    parse_date_time,
    resolve_date,
)
from receptionist.services.notifications import TelegramNotifier
from receptionist.services.repository import AppointmentRepository
from receptionist.services.tools import (
    TOOL_ARGUMENT_MODELS,
    BookAppointmentArgs,
    BusinessInfoArgs,
    CancelAppointmentArgs,
    CheckAvailabilityArgs,
)

logger = logging.getLogger(LOGGER_NAME)


class BookingService:
    """Executes tool calls for a business."""

    def __init__(
        self,
        repository: AppointmentRepository,
        notifier: Optional[TelegramNotifier] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.notifier = notifier or TelegramNotifier()
        self.today = today
        self._booking_locks: Dict[str, asyncio.Lock] = {}

    async def execute(
        self, business: BusinessContext, function_name: str, function_args: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Run a named tool for a business.

        Args:
            business: The business the call is for
            function_name: Tool name as emitted by the model
            function_args: Decoded JSON arguments

        Returns:
            The tool result payload; {"error": "Unknown function"} for unknown names

        Raises:
            ToolExecutionError: When the arguments are invalid
        """
        model = TOOL_ARGUMENT_MODELS.get(function_name)
        if model is None:
            logger.warning(f"Unknown function requested: {function_name}")
            return {"error": "Unknown function"}

        try:
            args = model(**(function_args or {}))
        except ValidationError as e:
            raise ToolExecutionError(
                f"Invalid arguments for {function_name}",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        logger.info(f"Executing {function_name} for business {business.id}")
        if function_name == TOOL_CHECK_AVAILABILITY:
            return await self.check_availability(business, args)
        if function_name == TOOL_BOOK_APPOINTMENT:
            return await self.book_appointment(business, args)
        if function_name == TOOL_CANCEL_APPOINTMENT:
            return await self.cancel_appointment(business, args)
        return self.get_business_info(business, args)

    async def check_availability(
        self, business: BusinessContext, args: CheckAvailabilityArgs
    ) -> Dict[str, Any]:
        try:
            day = resolve_date(args.date, self.today())
        except ValueError as e:
            raise ToolExecutionError(f"Invalid date: {args.date}") from e
        appointments = await self.repository.list_active(business.id, day)
        return check_availability(business, day, args.service, appointments).to_result()

    async def book_appointment(
        self, business: BusinessContext, args: BookAppointmentArgs
    ) -> Dict[str, Any]:
        try:
            requested = parse_date_time(args.date_time)
        except ValueError as e:
            raise ToolExecutionError(f"Invalid date_time: {args.date_time}") from e

        service = business.find_service(args.service)
        service_name = service.name if service else args.service
        duration = business.service_duration(args.service)
        requested_time = format_slot(requested)

        lock = self._booking_locks.setdefault(business.id, asyncio.Lock())
        async with lock:
            # The model may have offered this slot several turns ago
            day = requested.date()
            appointments = await self.repository.list_active(business.id, day)
            fresh = check_availability(business, day, args.service, appointments)
            if requested_time not in fresh.slots:
                alternatives = ", ".join(fresh.slots[:ALTERNATIVES_PREVIEW_COUNT])
                message = f"Sorry, {requested_time} is no longer available."
                if alternatives:
                    message += f" Available slots: {alternatives}"
                else:
                    message += " No other slots are free on that date."
                logger.info(f"Rejected booking for {requested.isoformat()} at {business.id}")
                return {"success": False, "message": message}

            appointment = await self.repository.create(
                Appointment(
                    id=self.repository.new_id(),
                    business_id=business.id,
                    customer_name=args.customer_name,
                    customer_phone=args.customer_phone,
                    service=service_name,
                    appointment_time=requested,
                    duration_minutes=duration,
                    notes=args.notes or None,
                )
            )

        logger.info(f"Booked appointment {appointment.id} for business {business.id}")
        await self.notifier.notify_booking(business.telegramChatId, appointment)
        return {
            "success": True,
            "appointmentId": appointment.id,
            "message": (
                f"Appointment confirmed for {args.customer_name} on "
                f"{requested:%A, %B} {requested.day} at {requested_time} for {service_name}"
            ),
        }

    async def cancel_appointment(
        self, business: BusinessContext, args: CancelAppointmentArgs
    ) -> Dict[str, Any]:
        at: Optional[datetime] = None
        if args.appointment_date_time:
            try:
                at = parse_date_time(args.appointment_date_time)
            except ValueError as e:
                raise ToolExecutionError(
                    f"Invalid appointment_date_time: {args.appointment_date_time}"
                ) from e

        matches = await self.repository.find_active(business.id, args.customer_phone, at)
        if not matches:
            return {"success": False, "message": "No matching appointment found"}

        for appointment in matches:
            cancelled = await self.repository.update_status(
                appointment.id, AppointmentStatus.CANCELLED
            )
            if cancelled is not None:
                logger.info(f"Cancelled appointment {cancelled.id} for business {business.id}")
                await self.notifier.notify_cancellation(business.telegramChatId, cancelled)

        return {
            "success": True,
            "message": "Appointment cancelled successfully. We hope to see you again soon!",
        }

    def get_business_info(self, business: BusinessContext, args: BusinessInfoArgs) -> Dict[str, Any]:
        return {"info": describe_business(business, args.info_type)}


def describe_business(business: BusinessContext, info_type: str) -> str:
    """Format business metadata as a sentence the agent can read out."""
    if info_type == "hours":
        days = []
        for day in WEEKDAYS:
            hours = business.hours_for(day)
            if hours is None or not hours.isOpen:
                days.append(f"{day.capitalize()}: Closed")
            else:
                days.append(f"{day.capitalize()}: {hours.open} - {hours.close}")
        return f"Our business hours are: {', '.join(days)}"
    if info_type == "services":
        return f"We offer: {', '.join(s.name for s in business.services)}"
    if info_type == "prices":
        return f"Our prices: {', '.join(f'{s.name}: ₹{s.price}' for s in business.services)}"
    if info_type == "location":
        return f"We are located at: {business.address}"
    return "Information not available"
