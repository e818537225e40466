from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from maternity.schemas.appointment import AppointmentStatus, AppointmentSummary


class DashboardStats(BaseModel):
    total_appointments: int
    today_appointments: int
    scheduled_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    total_patients: int
    total_doctors: int


class StatusCount(BaseModel):
    status: AppointmentStatus
    count: int


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_appointments: List[AppointmentSummary]
    status_distribution: List[StatusCount]
    missed_count: Optional[int] = None
