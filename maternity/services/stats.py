from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from maternity.clients.directory import DirectoryClient
from maternity.config import clinic_now, start_of_day
from maternity.schemas.appointment import AppointmentStatus
from maternity.schemas.stats import DashboardResponse, DashboardStats, StatusCount
from maternity.services.appointments import summarize_appointments
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import ServiceError
from maternity.services.remote_directory import default_directory
from maternity.services.sweeper import MissedAppointmentSweeper

logger = logging.getLogger(__name__)

RECENT_APPOINTMENTS = 10


class DashboardService:
    def __init__(
        self,
        client: DirectoryClient,
        *,
        directory: AppointmentDirectory | None = None,
        sweeper: MissedAppointmentSweeper | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._directory = directory or default_directory(client)
        self._now = now or clinic_now
        self._sweeper = sweeper or MissedAppointmentSweeper(
            client, directory=self._directory, now=self._now
        )

    async def dashboard(self) -> DashboardResponse:
        """Sweep missed appointments, then report statistics."""
        swept = await self._sweeper.sweep()
        response = await self.stats()
        response.missed_count = swept.missed_count
        return response

    async def stats(self) -> DashboardResponse:
        logger.info("Collecting dashboard statistics")
        today = start_of_day(self._now())
        tomorrow = today + timedelta(days=1)
        count = self._directory.count_appointments

        def with_status(status: AppointmentStatus) -> AppointmentQuery:
            return AppointmentQuery(status_in=[status])

        try:
            (
                total,
                today_total,
                scheduled,
                completed,
                cancelled,
                patients,
                doctors,
            ) = await asyncio.gather(
                count(AppointmentQuery()),
                count(AppointmentQuery(date_gte=today, date_lt=tomorrow)),
                count(with_status(AppointmentStatus.SCHEDULED)),
                count(with_status(AppointmentStatus.COMPLETED)),
                count(with_status(AppointmentStatus.CANCELLED)),
                self._directory.count_patients(),
                self._directory.count_doctors(),
            )
            recent = await self._directory.find_appointments(
                AppointmentQuery(order_by="created_at", descending=True, limit=RECENT_APPOINTMENTS)
            )
            distribution = await asyncio.gather(
                *(count(with_status(status)) for status in AppointmentStatus)
            )
            recent_summaries = await summarize_appointments(self._directory, recent)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while collecting statistics")
            raise ServiceError("Failed to fetch statistics", cause=exc)

        return DashboardResponse(
            stats=DashboardStats(
                total_appointments=total,
                today_appointments=today_total,
                scheduled_appointments=scheduled,
                completed_appointments=completed,
                cancelled_appointments=cancelled,
                total_patients=patients,
                total_doctors=doctors,
            ),
            recent_appointments=recent_summaries,
            status_distribution=[
                StatusCount(status=status, count=value)
                for status, value in zip(AppointmentStatus, distribution)
                if value
            ],
        )
