# maternity/mcp_server.py
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from maternity.auth import AdminSession, verify_admin_token
from maternity.dependencies.services import get_directory_client_cached
from maternity.schemas.appointment import CheckInResponse, SweepResponse
from maternity.schemas.doctor import DoctorScheduleResponse
from maternity.services.checkin import CheckInService
from maternity.services.exceptions import UnauthorizedError
from maternity.services.schedule import DoctorScheduleService
from maternity.services.sweeper import MissedAppointmentSweeper

log = logging.getLogger("maternity.mcp")

# Name shown to clients
mcp = FastMCP("maternity_front_desk")


# --------------------------
# Tool I/O models
# --------------------------
class AdminToolInput(BaseModel):
    session_token: str = Field(..., description="Admin session token issued at login")


class CheckInInput(AdminToolInput):
    appointment_id: str = Field(..., description="Appointment id, e.g. 'APT-00001'")


class ScheduleInput(AdminToolInput):
    date: Optional[date_type] = Field(None, description="Day to inspect (YYYY-MM-DD); defaults to today")


def _authorize(token: str) -> AdminSession:
    session = verify_admin_token(token)
    if session is None:
        raise UnauthorizedError("Unauthorized")
    return session


# --------------------------
# Tools
# --------------------------
@mcp.tool(name="appointments_check_in", description="Check a patient in and assign the next queue number")
async def appointments_check_in(input: CheckInInput) -> CheckInResponse:
    admin = _authorize(input.session_token)
    log.debug("appointments_check_in by %s for %s", admin.email, input.appointment_id)
    service = CheckInService(get_directory_client_cached())
    return await service.check_in(input.appointment_id)


@mcp.tool(name="appointments_mark_missed", description="Mark past unattended appointments as missed")
async def appointments_mark_missed(input: AdminToolInput) -> SweepResponse:
    admin = _authorize(input.session_token)
    log.debug("appointments_mark_missed by %s", admin.email)
    return await MissedAppointmentSweeper(get_directory_client_cached()).sweep()


@mcp.tool(name="doctor_schedules", description="Per-doctor bookings and slot utilisation for a day")
async def doctor_schedules(input: ScheduleInput) -> DoctorScheduleResponse:
    admin = _authorize(input.session_token)
    log.debug("doctor_schedules by %s for %s", admin.email, input.date)
    return await DoctorScheduleService(get_directory_client_cached()).schedules(input.date)


@mcp.tool(name="ping", description="Health check")
async def ping(message: str) -> str:
    log.debug("ping %s", message)
    return f"pong: {message}"
