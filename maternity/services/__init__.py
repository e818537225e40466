"""Service package public API definitions.

Service implementations are imported lazily. ``maternity.clients.directory``
imports ``maternity.services.exceptions``, which executes this module first;
importing the services eagerly here would import the client again while it
is still initialising.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AppointmentService",
    "CheckInService",
    "DashboardService",
    "DoctorScheduleService",
    "DoctorService",
    "MissedAppointmentSweeper",
]

_SERVICE_MODULES = {
    "AppointmentService": "appointments",
    "CheckInService": "checkin",
    "DashboardService": "stats",
    "DoctorScheduleService": "schedule",
    "DoctorService": "doctors",
    "MissedAppointmentSweeper": "sweeper",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .appointments import AppointmentService as AppointmentService
    from .checkin import CheckInService as CheckInService
    from .doctors import DoctorService as DoctorService
    from .schedule import DoctorScheduleService as DoctorScheduleService
    from .stats import DashboardService as DashboardService
    from .sweeper import MissedAppointmentSweeper as MissedAppointmentSweeper
