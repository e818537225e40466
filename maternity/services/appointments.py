from __future__ import annotations

import asyncio
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Sequence

from maternity.clients.directory import DirectoryClient
from maternity.config import clinic_now, start_of_day
from maternity.schemas.appointment import (
    Appointment,
    AppointmentListRequest,
    AppointmentListResponse,
    AppointmentPatch,
    AppointmentStatus,
    AppointmentSummary,
    BookingRequest,
    Pagination,
    PatientAppointmentsResponse,
)
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import NotFoundError, ServiceError, ValidationError
from maternity.services.remote_directory import default_directory
from maternity.services.slots import time_of_day_minutes

logger = logging.getLogger(__name__)

# Fields an admin may clear by sending null; every other patch field is
# ignored when null.
_CLEARABLE_FIELDS = {"notes", "doctor_notes", "diagnosis", "prescription", "cancellation_reason"}


async def summarize_appointments(
    directory: AppointmentDirectory, appointments: Sequence[Appointment]
) -> List[AppointmentSummary]:
    """Attach patient and doctor display names to ``appointments``."""
    if not appointments:
        return []
    patients, doctors = await asyncio.gather(
        directory.get_patients([appointment.patient_id for appointment in appointments]),
        directory.list_doctors(),
    )
    doctor_names = {doctor.id: doctor.display_name for doctor in doctors}
    summaries = []
    for appointment in appointments:
        patient = patients.get(appointment.patient_id)
        summaries.append(
            AppointmentSummary(
                **appointment.model_dump(),
                patient_name=patient.full_name if patient else None,
                doctor_name=doctor_names.get(appointment.doctor_id),
            )
        )
    return summaries


class AppointmentService:
    """Admin operations over appointments plus patient booking."""

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

    def _local_midnight(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self._now().tzinfo)

    async def list(self, request: AppointmentListRequest) -> AppointmentListResponse:
        logger.info("Listing appointments page %s (limit %s)", request.page, request.limit)
        query = AppointmentQuery(
            status_in=[request.status] if request.status else None,
            doctor_id=request.doctor_id,
            patient_name=request.patient_name,
            date_gte=self._local_midnight(request.date_from) if request.date_from else None,
            date_lt=(
                self._local_midnight(request.date_to) + timedelta(days=1)
                if request.date_to
                else None
            ),
            order_by="appointment_date",
            descending=True,
            offset=(request.page - 1) * request.limit,
            limit=request.limit,
        )
        try:
            appointments, total = await asyncio.gather(
                self._directory.find_appointments(query),
                self._directory.count_appointments(query),
            )
            items = await summarize_appointments(self._directory, appointments)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while listing appointments")
            raise ServiceError("Failed to fetch appointments", cause=exc)

        return AppointmentListResponse(
            items=items,
            pagination=Pagination(
                total=total,
                page=request.page,
                limit=request.limit,
                total_pages=math.ceil(total / request.limit),
            ),
        )

    async def get(self, appointment_id: str) -> AppointmentSummary:
        try:
            appointment = await self._directory.get_appointment(appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            [summary] = await summarize_appointments(self._directory, [appointment])
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while fetching appointment %s", appointment_id)
            raise ServiceError("Failed to fetch appointment", cause=exc)
        return summary

    async def for_patient(self, patient_id: str) -> PatientAppointmentsResponse:
        """A patient's own appointments, soonest first."""
        logger.info("Listing appointments for patient %s", patient_id)
        try:
            appointments = await self._directory.find_appointments(
                AppointmentQuery(patient_id=patient_id, order_by="appointment_date")
            )
            items = await summarize_appointments(self._directory, appointments)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while listing appointments for patient %s", patient_id)
            raise ServiceError("Failed to fetch appointments", cause=exc)
        return PatientAppointmentsResponse(appointments=items)

    async def update(self, appointment_id: str, patch: AppointmentPatch) -> Appointment:
        logger.info("Updating appointment %s", appointment_id)
        changes: Dict[str, Any] = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field in _CLEARABLE_FIELDS
        }
        now = self._now()
        for field, value in changes.items():
            # Naive datetimes are read as clinic-local wall time.
            if isinstance(value, datetime) and value.tzinfo is None:
                changes[field] = value.replace(tzinfo=now.tzinfo)
        if "cancellation_reason" in changes:
            changes["cancelled_at"] = now
        if changes.get("check_in_time") is not None:
            changes["checked_in"] = True
        changes["updated_at"] = now

        try:
            updated = await self._directory.update_appointment(appointment_id, changes)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while updating appointment %s", appointment_id)
            raise ServiceError("Failed to update appointment", cause=exc)
        if updated is None:
            raise NotFoundError("Appointment not found")
        return updated

    async def delete(self, appointment_id: str) -> None:
        logger.info("Deleting appointment %s", appointment_id)
        try:
            deleted = await self._directory.delete_appointment(appointment_id)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while deleting appointment %s", appointment_id)
            raise ServiceError("Failed to delete appointment", cause=exc)
        if not deleted:
            raise NotFoundError("Appointment not found")

    async def book(self, request: BookingRequest) -> Appointment:
        logger.info("Booking %s with doctor %s on %s", request.appointment_type, request.doctor_id, request.appointment_date)
        if request.appointment_date < start_of_day(self._now()).date():
            raise ValidationError("Appointment date cannot be in the past")
        if time_of_day_minutes(request.appointment_time) is None:
            raise ValidationError("Invalid appointment time. Use HH:MM or HH:MM AM/PM")

        patient, doctor = await asyncio.gather(
            self._directory.get_patient(request.patient_id),
            self._directory.get_doctor(request.doctor_id),
        )
        if patient is None:
            raise NotFoundError("Patient not found")
        if doctor is None:
            raise NotFoundError("Doctor not found")
        if not doctor.is_accepting_patients or doctor.is_on_leave:
            raise ValidationError("Doctor is not accepting patients")

        try:
            return await self._directory.create_appointment(
                {
                    "patient_id": request.patient_id,
                    "doctor_id": request.doctor_id,
                    "appointment_type": request.appointment_type,
                    "appointment_date": self._local_midnight(request.appointment_date),
                    "appointment_time": request.appointment_time,
                    "notes": request.notes,
                    "status": AppointmentStatus.SCHEDULED,
                }
            )
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while booking appointment")
            raise ServiceError("Failed to book appointment", cause=exc)
