from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from maternity.clients.directory import DirectoryClient
from maternity.config import clinic_now
from maternity.schemas.appointment import Appointment, AppointmentStatus, SweepResponse
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import ConflictError, ServiceError
from maternity.services.remote_directory import default_directory

logger = logging.getLogger(__name__)

SWEEPABLE_STATUSES = [AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED]


class MissedAppointmentSweeper:
    """Marks past appointments that were never checked in as MISSED."""

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

    async def sweep(self) -> SweepResponse:
        now = self._now()
        logger.info("Sweeping appointments scheduled before %s", now.isoformat())
        try:
            stale = await self._directory.find_appointments(
                AppointmentQuery(
                    status_in=SWEEPABLE_STATUSES,
                    checked_in=False,
                    date_lt=now,
                )
            )
            results = await asyncio.gather(*(self._mark_missed(appointment) for appointment in stale))
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while marking missed appointments")
            raise ServiceError("Failed to mark missed appointments", cause=exc)

        missed_count = sum(1 for transitioned in results if transitioned)
        logger.info("Marked %d appointments as missed", missed_count)
        return SweepResponse(
            missed_count=missed_count,
            message=f"Marked {missed_count} appointments as missed",
        )

    async def _mark_missed(self, appointment: Appointment) -> bool:
        try:
            updated = await self._directory.update_appointment(
                appointment.id,
                {"status": AppointmentStatus.MISSED},
                expect={"checked_in": False, "status": appointment.status},
            )
        except ConflictError:
            # Checked in or edited since it was selected.
            logger.info("Skipping appointment %s changed during sweep", appointment.id)
            return False
        return updated is not None
