from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable

from maternity.clients.directory import DirectoryClient
from maternity.config import clinic_now, start_of_day
from maternity.schemas.appointment import AppointmentStatus, CheckInResponse
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import (
    AlreadyCheckedInError,
    ConflictError,
    NotFoundError,
    PastAppointmentError,
    ServiceError,
)
from maternity.services.remote_directory import default_directory

logger = logging.getLogger(__name__)


def format_queue_number(sequence: int) -> str:
    return f"Q{sequence:03d}"


def queue_counter_key(day: date) -> str:
    return f"queue-{day.isoformat()}"


class CheckInService:
    """Front-desk check-in: marks an appointment as arrived and hands out
    the next queue number of the day.

    The sequence comes from a per-day counter incremented atomically by the
    directory. The first check-in of a day seeds that counter with the number
    of check-ins already recorded, so numbering continues from existing data.
    """

    def __init__(
        self,
        client: DirectoryClient,
        *,
        directory: AppointmentDirectory | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._directory = directory or default_directory(client)
        self._now = now or clinic_now

    async def check_in(self, appointment_id: str) -> CheckInResponse:
        logger.info("Checking in appointment %s", appointment_id)
        try:
            return await self._check_in(appointment_id)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while checking in appointment %s", appointment_id)
            raise ServiceError("Failed to check in patient", cause=exc)

    async def _check_in(self, appointment_id: str) -> CheckInResponse:
        appointment = await self._directory.get_appointment(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        if appointment.checked_in:
            raise AlreadyCheckedInError("Patient already checked in")

        now = self._now()
        today = start_of_day(now)
        tomorrow = today + timedelta(days=1)
        if appointment.appointment_date < today:
            raise PastAppointmentError("Cannot check in for past appointments")

        checked_in_today = await self._directory.count_appointments(
            AppointmentQuery(checked_in=True, check_in_gte=today, check_in_lt=tomorrow)
        )
        sequence = await self._directory.increment_counter(
            queue_counter_key(today.date()), initial=checked_in_today
        )
        queue_number = format_queue_number(sequence)

        try:
            updated = await self._directory.update_appointment(
                appointment_id,
                {
                    "checked_in": True,
                    "check_in_time": now,
                    "queue_number": queue_number,
                    "status": AppointmentStatus.CHECKED_IN,
                    "updated_at": now,
                },
                expect={"checked_in": False},
            )
        except ConflictError as exc:
            # Lost a race with another check-in of the same appointment; the
            # sequence value is discarded.
            raise AlreadyCheckedInError("Patient already checked in", cause=exc) from exc
        if updated is None:
            raise NotFoundError("Appointment not found")

        logger.info("Appointment %s checked in with queue number %s", appointment_id, queue_number)
        return CheckInResponse(queue_number=queue_number, appointment=updated)
