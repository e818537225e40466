from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    MISSED = "MISSED"
    PENDING = "PENDING"


class Appointment(BaseModel):
    id: str
    appointment_number: str
    patient_id: str
    doctor_id: str
    appointment_type: str
    appointment_date: datetime
    appointment_time: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    checked_in: bool = False
    check_in_time: Optional[datetime] = None
    queue_number: Optional[str] = None
    notes: Optional[str] = None
    doctor_notes: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AppointmentSummary(Appointment):
    """Appointment enriched with display names for admin listings."""

    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None


class AppointmentPatch(BaseModel):
    """Partial update of the fields an admin may edit.

    Fields left unset are not touched. ``cancellation_reason`` also stamps
    ``cancelled_at`` and ``check_in_time`` also marks the appointment as
    checked in.
    """

    status: Optional[AppointmentStatus] = None
    appointment_date: Optional[datetime] = None
    appointment_time: Optional[str] = None
    notes: Optional[str] = None
    doctor_notes: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    follow_up_required: Optional[bool] = None
    follow_up_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    check_in_time: Optional[datetime] = None
    queue_number: Optional[str] = None


class AppointmentListRequest(BaseModel):
    status: Optional[AppointmentStatus] = None
    patient_name: Optional[str] = None
    doctor_id: Optional[str] = None
    date_from: Optional[date] = None  # inclusive
    date_to: Optional[date] = None    # inclusive
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=200)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class AppointmentListResponse(BaseModel):
    items: List[AppointmentSummary]
    pagination: Pagination


class BookingRequest(BaseModel):
    patient_id: str
    doctor_id: str
    appointment_type: str
    appointment_date: date
    appointment_time: str
    notes: Optional[str] = None


class CheckInResponse(BaseModel):
    queue_number: str
    appointment: Appointment


class SweepResponse(BaseModel):
    missed_count: int
    message: str


class PatientAppointmentsResponse(BaseModel):
    success: bool = True
    appointments: List[AppointmentSummary]
