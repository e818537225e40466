from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from maternity.clients.directory import DirectoryClient
from maternity.config import Settings, get_settings
from maternity.services.appointments import AppointmentService
from maternity.services.checkin import CheckInService
from maternity.services.doctors import DoctorService
from maternity.services.schedule import DoctorScheduleService
from maternity.services.stats import DashboardService
from maternity.services.sweeper import MissedAppointmentSweeper


@lru_cache(maxsize=1)
def get_directory_client_cached() -> DirectoryClient:
    settings = get_settings()
    return DirectoryClient(
        str(settings.directory_base_url) if settings.directory_base_url else None,
        timeout=settings.directory_timeout,
        use_mock_data=settings.use_mock_data,
        token=settings.directory_token,
    )


def get_directory_client(settings: Settings = Depends(get_settings)) -> DirectoryClient:
    return get_directory_client_cached()


def get_check_in_service(
    client: DirectoryClient = Depends(get_directory_client),
) -> CheckInService:
    return CheckInService(client)


def get_sweeper(
    client: DirectoryClient = Depends(get_directory_client),
) -> MissedAppointmentSweeper:
    return MissedAppointmentSweeper(client)


def get_schedule_service(
    client: DirectoryClient = Depends(get_directory_client),
) -> DoctorScheduleService:
    return DoctorScheduleService(client)


def get_appointment_service(
    client: DirectoryClient = Depends(get_directory_client),
) -> AppointmentService:
    return AppointmentService(client)


def get_dashboard_service(
    client: DirectoryClient = Depends(get_directory_client),
) -> DashboardService:
    return DashboardService(client)


def get_doctor_service(
    client: DirectoryClient = Depends(get_directory_client),
) -> DoctorService:
    return DoctorService(client)
