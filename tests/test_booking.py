"""
Tests for tool execution against the appointment book.
"""

import asyncio
from datetime import date, datetime

import pytest

from receptionist.exceptions import ToolExecutionError
from receptionist.models.appointments import AppointmentStatus
from receptionist.services.booking import describe_business

BOOKING_ARGS = {
    "customer_name": "Amit Kumar",
    "customer_phone": "+91 98765 43210",
    "service": "Haircut",
    "date_time": "2024-06-10T10:00:00",
}


@pytest.mark.asyncio
async def test_check_availability_on_open_day(booking, barber):
    result = await booking.execute(barber, "check_availability", {"date": "2024-06-10", "service": "Haircut"})

    assert result["slots"][0] == "9:00 AM"
    assert result["slots"][-1] == "7:30 PM"
    assert result["message"].startswith("Available slots: 9:00 AM")


@pytest.mark.asyncio
async def test_check_availability_resolves_tomorrow(booking, barber):
    tomorrow = await booking.execute(barber, "check_availability", {"date": "tomorrow"})
    explicit = await booking.execute(barber, "check_availability", {"date": "2024-06-10"})

    assert tomorrow == explicit


@pytest.mark.asyncio
async def test_check_availability_invalid_date(booking, barber):
    with pytest.raises(ToolExecutionError):
        await booking.execute(barber, "check_availability", {"date": "someday"})


@pytest.mark.asyncio
async def test_book_appointment_persists_and_notifies(booking, barber, repository, notifier):
    result = await booking.execute(barber, "book_appointment", BOOKING_ARGS)

    assert result["success"] is True
    assert result["appointmentId"].startswith("apt_")
    assert result["message"] == (
        "Appointment confirmed for Amit Kumar on Monday, June 10 at 10:00 AM for Haircut"
    )

    stored = await repository.list_active(barber.id, date(2024, 6, 10))
    assert [apt.id for apt in stored] == [result["appointmentId"]]
    assert stored[0].duration_minutes == 30

    assert len(notifier.bookings) == 1
    chat_id, appointment = notifier.bookings[0]
    assert chat_id == barber.telegramChatId
    assert appointment.customer_name == "Amit Kumar"


@pytest.mark.asyncio
async def test_booked_slot_disappears_from_availability(booking, barber):
    await booking.execute(barber, "book_appointment", BOOKING_ARGS)

    result = await booking.execute(barber, "check_availability", {"date": "2024-06-10"})

    assert "9:30 AM" in result["slots"]
    assert "10:00 AM" not in result["slots"]


@pytest.mark.asyncio
async def test_stale_slot_is_rejected(booking, barber, repository, make_appointment, notifier):
    await repository.create(make_appointment(barber, datetime(2024, 6, 10, 10, 0), 30, phone="9000000000"))

    result = await booking.execute(barber, "book_appointment", BOOKING_ARGS)

    assert result["success"] is False
    assert "no longer available" in result["message"]
    assert "Available slots: 9:00 AM, 9:30 AM, 10:30 AM" in result["message"]
    assert notifier.bookings == []


@pytest.mark.asyncio
async def test_booking_outside_hours_is_rejected(booking, barber):
    args = dict(BOOKING_ARGS, date_time="2024-06-10T19:45:00")

    result = await booking.execute(barber, "book_appointment", args)

    assert result["success"] is False
    assert "7:45 PM is no longer available" in result["message"]


@pytest.mark.asyncio
async def test_booking_on_closed_day_has_no_alternatives(booking, dentist):
    args = dict(BOOKING_ARGS, service="Checkup", date_time="2024-06-16T10:00:00")

    result = await booking.execute(dentist, "book_appointment", args)

    assert result["success"] is False
    assert result["message"].endswith("No other slots are free on that date.")


@pytest.mark.asyncio
async def test_concurrent_bookings_for_same_slot(booking, barber):
    first, second = await asyncio.gather(
        booking.execute(barber, "book_appointment", BOOKING_ARGS),
        booking.execute(barber, "book_appointment", dict(BOOKING_ARGS, customer_name="Ravi")),
    )

    assert sorted([first["success"], second["success"]]) == [False, True]


@pytest.mark.asyncio
async def test_book_with_invalid_arguments(booking, barber):
    with pytest.raises(ToolExecutionError) as exc_info:
        await booking.execute(barber, "book_appointment", dict(BOOKING_ARGS, customer_name="  "))

    assert "Invalid arguments" in exc_info.value.message


@pytest.mark.asyncio
async def test_cancel_appointment_by_phone(booking, barber, repository, notifier):
    booked = await booking.execute(barber, "book_appointment", BOOKING_ARGS)

    result = await booking.execute(barber, "cancel_appointment", {"customer_phone": "9876543210"})

    assert result == {
        "success": True,
        "message": "Appointment cancelled successfully. We hope to see you again soon!",
    }
    assert await repository.list_active(barber.id, date(2024, 6, 10)) == []
    assert notifier.cancellations[0][1].id == booked["appointmentId"]
    assert notifier.cancellations[0][1].status == AppointmentStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_matches_exact_time(booking, barber):
    await booking.execute(barber, "book_appointment", BOOKING_ARGS)

    result = await booking.execute(
        barber,
        "cancel_appointment",
        {"customer_phone": "9876543210", "appointment_date_time": "2024-06-10T11:00:00"},
    )

    assert result == {"success": False, "message": "No matching appointment found"}


@pytest.mark.asyncio
async def test_cancel_without_bookings(booking, barber):
    result = await booking.execute(barber, "cancel_appointment", {"customer_phone": "9123456789"})

    assert result["success"] is False


@pytest.mark.asyncio
async def test_unknown_function(booking, barber):
    result = await booking.execute(barber, "order_pizza", {})

    assert result == {"error": "Unknown function"}


@pytest.mark.asyncio
async def test_business_hours_lists_every_weekday(booking, dentist):
    result = await booking.execute(dentist, "get_business_info", {"info_type": "hours"})

    assert result["info"] == (
        "Our business hours are: Monday: 09:00 - 18:00, Tuesday: 09:00 - 18:00, "
        "Wednesday: 09:00 - 18:00, Thursday: 09:00 - 18:00, Friday: 09:00 - 18:00, "
        "Saturday: 10:00 - 14:00, Sunday: Closed"
    )


def test_describe_business_other_topics(barber):
    assert describe_business(barber, "services").startswith("We offer: Haircut, Beard Trim")
    assert "Haircut: ₹300" in describe_business(barber, "prices")
    assert describe_business(barber, "location") == (
        "We are located at: 123 MG Road, Bangalore. Near Metro Station."
    )
    assert describe_business(barber, "parking") == "Information not available"


@pytest.mark.asyncio
async def test_business_info_rejects_unknown_topic(booking, barber):
    with pytest.raises(ToolExecutionError):
        await booking.execute(barber, "get_business_info", {"info_type": "parking"})
