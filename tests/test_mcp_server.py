import asyncio

import pytest

from maternity.auth import AdminSession, create_admin_token
from maternity.config import clinic_now
from maternity.mcp_server import (
    AdminToolInput,
    CheckInInput,
    ScheduleInput,
    appointments_check_in,
    appointments_mark_missed,
    doctor_schedules,
    ping,
)
from maternity.services.exceptions import UnauthorizedError
from maternity.services.mock_store import get_mock_store


@pytest.fixture
def token() -> str:
    admin = AdminSession(
        id="ADM-1",
        email="admin@example.com",
        first_name="Super",
        last_name="Admin",
        role="ADMIN",
    )
    return create_admin_token(admin)


def test_ping() -> None:
    assert asyncio.run(ping("hello")) == "pong: hello"


def test_tools_reject_invalid_tokens() -> None:
    with pytest.raises(UnauthorizedError):
        asyncio.run(appointments_mark_missed(AdminToolInput(session_token="not-a-token")))
    with pytest.raises(UnauthorizedError):
        asyncio.run(
            appointments_check_in(CheckInInput(session_token="not-a-token", appointment_id="APT-00001"))
        )


def test_check_in_tool(token) -> None:
    today = clinic_now().date()
    appointment = next(
        record
        for record in get_mock_store().iter_appointments()
        if record.appointment_date.date() == today
    )

    response = asyncio.run(
        appointments_check_in(CheckInInput(session_token=token, appointment_id=appointment.id))
    )

    assert response.queue_number == "Q001"
    assert response.appointment.checked_in is True


def test_mark_missed_and_schedule_tools(token) -> None:
    swept = asyncio.run(appointments_mark_missed(AdminToolInput(session_token=token)))
    schedules = asyncio.run(doctor_schedules(ScheduleInput(session_token=token)))

    assert swept.missed_count == 2
    assert schedules.date.startswith(clinic_now().date().isoformat())
    # Missed bookings no longer occupy a slot.
    assert all(entry.stats.booked_slots == 0 for entry in schedules.schedules)
