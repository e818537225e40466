from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from maternity.clients.directory import DirectoryClient
from maternity.config import clinic_now, start_of_day
from maternity.schemas.appointment import AppointmentStatus
from maternity.schemas.doctor import (
    Doctor,
    DoctorSchedule,
    DoctorScheduleResponse,
    DoctorSummary,
    ScheduledAppointment,
    ScheduleStats,
)
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import ServiceError
from maternity.services.remote_directory import default_directory
from maternity.services.slots import calculate_total_slots, utilization_rate

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = [
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.CHECKED_IN,
]


class DoctorScheduleService:
    """Per-doctor view of a day's bookings and slot utilisation. Read only."""

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

    async def schedules(self, target: Optional[date] = None) -> DoctorScheduleResponse:
        now = self._now()
        day_start = (
            datetime.combine(target, time.min, tzinfo=now.tzinfo)
            if target
            else start_of_day(now)
        )
        day_end = day_start + timedelta(days=1)
        logger.info("Building doctor schedules for %s", day_start.date().isoformat())

        try:
            doctors = await self._directory.list_doctors(available_only=True)
            schedules = await asyncio.gather(
                *(self._doctor_schedule(doctor, day_start, day_end) for doctor in doctors)
            )
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while building doctor schedules")
            raise ServiceError("Failed to fetch doctor schedules", cause=exc)

        return DoctorScheduleResponse(date=day_start.isoformat(), schedules=list(schedules))

    async def _doctor_schedule(self, doctor: Doctor, day_start: datetime, day_end: datetime) -> DoctorSchedule:
        appointments = await self._directory.find_appointments(
            AppointmentQuery(
                doctor_id=doctor.id,
                date_gte=day_start,
                date_lt=day_end,
                status_in=ACTIVE_STATUSES,
                order_by="appointment_time",
            )
        )
        patients = await self._directory.get_patients(
            [appointment.patient_id for appointment in appointments]
        )

        total_slots = calculate_total_slots(doctor.working_hours)
        booked_slots = len(appointments)
        return DoctorSchedule(
            doctor=DoctorSummary(
                id=doctor.id,
                name=doctor.display_name,
                specialization=doctor.specialization,
                working_hours=doctor.working_hours,
                consultation_duration=doctor.consultation_duration,
            ),
            appointments=[
                ScheduledAppointment(
                    id=appointment.id,
                    appointment_number=appointment.appointment_number,
                    patient_name=(
                        patients[appointment.patient_id].full_name
                        if appointment.patient_id in patients
                        else "Unknown patient"
                    ),
                    time=appointment.appointment_time,
                    status=appointment.status,
                    type=appointment.appointment_type,
                )
                for appointment in appointments
            ],
            stats=ScheduleStats(
                total_slots=total_slots,
                booked_slots=booked_slots,
                available_slots=total_slots - booked_slots,
                utilization_rate=utilization_rate(booked_slots, total_slots),
            ),
        )
