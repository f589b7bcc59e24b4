from datetime import date, datetime

import pytest

from receptionist.models.appointments import AppointmentStatus
from receptionist.services.repository import normalize_phone


def test_normalize_phone():
    assert normalize_phone("+91 98765-43210") == "9876543210"
    assert normalize_phone("9876543210") == "9876543210"
    assert normalize_phone("") == ""


@pytest.mark.asyncio
class TestInMemoryAppointmentRepository:

    async def test_list_active_is_sorted_and_scoped(self, repository, barber, dentist, make_appointment):
        late = await repository.create(make_appointment(barber, datetime(2024, 6, 10, 15, 0)))
        early = await repository.create(make_appointment(barber, datetime(2024, 6, 10, 9, 0)))
        await repository.create(make_appointment(barber, datetime(2024, 6, 11, 9, 0)))
        await repository.create(make_appointment(dentist, datetime(2024, 6, 10, 9, 0)))

        listed = await repository.list_active(barber.id, date(2024, 6, 10))

        assert [apt.id for apt in listed] == [early.id, late.id]

    async def test_update_status(self, repository, barber, make_appointment):
        apt = await repository.create(make_appointment(barber, datetime(2024, 6, 10, 9, 0)))

        updated = await repository.update_status(apt.id, AppointmentStatus.CANCELLED)

        assert updated.status == AppointmentStatus.CANCELLED
        assert await repository.list_active(barber.id, date(2024, 6, 10)) == []

    async def test_update_missing_appointment(self, repository):
        assert await repository.update_status("apt_missing", AppointmentStatus.CANCELLED) is None

    async def test_find_active_by_phone_and_time(self, repository, barber, make_appointment):
        first = await repository.create(
            make_appointment(barber, datetime(2024, 6, 10, 9, 0), phone="+91 98765 43210")
        )
        await repository.create(make_appointment(barber, datetime(2024, 6, 10, 11, 0), phone="9876543210"))
        await repository.create(make_appointment(barber, datetime(2024, 6, 10, 12, 0), phone="9000000000"))

        by_phone = await repository.find_active(barber.id, "98765 43210")
        by_time = await repository.find_active(barber.id, "9876543210", datetime(2024, 6, 10, 9, 0))

        assert len(by_phone) == 2
        assert [apt.id for apt in by_time] == [first.id]

    async def test_new_ids_are_unique(self, repository):
        assert repository.new_id() != repository.new_id()
