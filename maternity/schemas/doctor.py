from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from maternity.schemas.appointment import AppointmentStatus


class Doctor(BaseModel):
    id: str
    first_name: str
    last_name: str
    specialization: str
    working_hours: str = Field(..., description='Free text, e.g. "09:00-17:00" or "9:00 AM - 5:00 PM"')
    consultation_duration: int = 30
    is_accepting_patients: bool = True
    is_on_leave: bool = False

    @property
    def display_name(self) -> str:
        return f"Dr. {self.first_name} {self.last_name}"


class Patient(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class DoctorSummary(BaseModel):
    id: str
    name: str
    specialization: str
    working_hours: str
    consultation_duration: int


class ScheduledAppointment(BaseModel):
    id: str
    appointment_number: str
    patient_name: str
    time: str
    status: AppointmentStatus
    type: str


class ScheduleStats(BaseModel):
    total_slots: int
    booked_slots: int
    available_slots: int
    utilization_rate: str


class DoctorSchedule(BaseModel):
    doctor: DoctorSummary
    appointments: List[ScheduledAppointment]
    stats: ScheduleStats


class DoctorScheduleResponse(BaseModel):
    date: str
    schedules: List[DoctorSchedule]


class DoctorListResponse(BaseModel):
    success: bool = True
    doctors: List[Doctor]
