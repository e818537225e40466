import asyncio
from datetime import timedelta

import pytest

from maternity.schemas.appointment import AppointmentStatus
from maternity.services.checkin import CheckInService, format_queue_number, queue_counter_key
from maternity.services.exceptions import (
    AlreadyCheckedInError,
    ConflictError,
    NotFoundError,
    PastAppointmentError,
)

from conftest import FIXED_NOW, TODAY, add_appointment, fixed_clock


def _service(client, directory) -> CheckInService:
    return CheckInService(client, directory=directory, now=fixed_clock)


def test_queue_number_formatting():
    assert format_queue_number(1) == "Q001"
    assert format_queue_number(42) == "Q042"
    assert format_queue_number(1000) == "Q1000"
    assert queue_counter_key(TODAY.date()) == "queue-2026-03-10"


def test_sequential_check_ins_number_from_one(client, directory) -> None:
    service = _service(client, directory)
    appointments = [add_appointment(directory, time=f"{9 + i}:00 AM") for i in range(3)]

    numbers = [asyncio.run(service.check_in(a.id)).queue_number for a in appointments]

    assert numbers == ["Q001", "Q002", "Q003"]


def test_check_in_updates_appointment(client, directory) -> None:
    service = _service(client, directory)
    appointment = add_appointment(directory, status=AppointmentStatus.CONFIRMED)

    response = asyncio.run(service.check_in(appointment.id))

    stored = asyncio.run(directory.get_appointment(appointment.id))
    assert response.appointment == stored
    assert stored.checked_in is True
    assert stored.check_in_time == FIXED_NOW
    assert stored.queue_number == "Q001"
    assert stored.status == AppointmentStatus.CHECKED_IN


def test_check_in_unknown_appointment(client, directory) -> None:
    with pytest.raises(NotFoundError, match="Appointment not found"):
        asyncio.run(_service(client, directory).check_in("APT-missing"))


def test_check_in_twice_is_rejected(client, directory) -> None:
    service = _service(client, directory)
    appointment = add_appointment(directory)
    asyncio.run(service.check_in(appointment.id))

    with pytest.raises(AlreadyCheckedInError, match="already checked in"):
        asyncio.run(service.check_in(appointment.id))

    stored = asyncio.run(directory.get_appointment(appointment.id))
    assert stored.queue_number == "Q001"


def test_already_checked_in_is_a_conflict(client, directory) -> None:
    appointment = add_appointment(directory, checked_in=True, check_in_time=FIXED_NOW - timedelta(days=2))

    with pytest.raises(ConflictError):
        asyncio.run(_service(client, directory).check_in(appointment.id))


def test_past_appointment_cannot_check_in(client, directory) -> None:
    appointment = add_appointment(directory, day_offset=-1)

    with pytest.raises(PastAppointmentError, match="past appointments"):
        asyncio.run(_service(client, directory).check_in(appointment.id))

    stored = asyncio.run(directory.get_appointment(appointment.id))
    assert stored.checked_in is False
    assert stored.queue_number is None


def test_same_day_and_future_appointments_can_check_in(client, directory) -> None:
    service = _service(client, directory)
    today = add_appointment(directory, day_offset=0)
    next_week = add_appointment(directory, day_offset=7)

    assert asyncio.run(service.check_in(today.id)).queue_number == "Q001"
    assert asyncio.run(service.check_in(next_week.id)).queue_number == "Q002"


def test_numbering_continues_from_existing_check_ins(client, directory) -> None:
    add_appointment(
        directory,
        status=AppointmentStatus.CHECKED_IN,
        checked_in=True,
        check_in_time=FIXED_NOW - timedelta(hours=1),
        queue_number="Q001",
    )
    add_appointment(
        directory,
        day_offset=-1,
        status=AppointmentStatus.CHECKED_IN,
        checked_in=True,
        check_in_time=FIXED_NOW - timedelta(days=1),
        queue_number="Q009",
    )
    appointment = add_appointment(directory, time="11:00 AM")

    response = asyncio.run(_service(client, directory).check_in(appointment.id))

    assert response.queue_number == "Q002"


def test_numbering_restarts_each_day(client, directory) -> None:
    first = add_appointment(directory)
    second = add_appointment(directory, day_offset=1)

    asyncio.run(_service(client, directory).check_in(first.id))
    tomorrow = CheckInService(client, directory=directory, now=lambda: FIXED_NOW + timedelta(days=1))
    response = asyncio.run(tomorrow.check_in(second.id))

    assert response.queue_number == "Q001"


def test_concurrent_check_ins_get_distinct_numbers(client, directory) -> None:
    service = _service(client, directory)
    appointments = [add_appointment(directory, time=f"{8 + i % 8}:00 AM") for i in range(12)]

    async def check_in_all():
        return await asyncio.gather(*(service.check_in(a.id) for a in appointments))

    responses = asyncio.run(check_in_all())
    numbers = [response.queue_number for response in responses]

    assert len(set(numbers)) == len(appointments)
    assert sorted(numbers) == [format_queue_number(n) for n in range(1, 13)]


def test_concurrent_check_ins_of_same_appointment_assign_once(client, directory) -> None:
    service = _service(client, directory)
    appointment = add_appointment(directory)

    async def race():
        return await asyncio.gather(
            *(service.check_in(appointment.id) for _ in range(5)),
            return_exceptions=True,
        )

    results = asyncio.run(race())
    successes = [result for result in results if not isinstance(result, Exception)]
    failures = [result for result in results if isinstance(result, Exception)]

    assert len(successes) == 1
    assert len(failures) == 4
    assert all(isinstance(failure, AlreadyCheckedInError) for failure in failures)

    stored = asyncio.run(directory.get_appointment(appointment.id))
    assert stored.queue_number == successes[0].queue_number


def test_unexpected_failure_is_reported_generically(client, directory, monkeypatch) -> None:
    appointment = add_appointment(directory)

    async def broken_count(query):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(directory, "count_appointments", broken_count)

    with pytest.raises(Exception) as excinfo:
        asyncio.run(_service(client, directory).check_in(appointment.id))

    assert str(excinfo.value) == "Failed to check in patient"
    assert isinstance(excinfo.value.cause, RuntimeError)
