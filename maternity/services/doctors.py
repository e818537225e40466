from __future__ import annotations

import logging
from typing import Optional

from maternity.clients.directory import DirectoryClient
from maternity.schemas.doctor import DoctorListResponse
from maternity.services.directory import AppointmentDirectory
from maternity.services.exceptions import ServiceError
from maternity.services.remote_directory import default_directory

logger = logging.getLogger(__name__)


class DoctorService:
    """Public doctor directory shown to patients choosing who to book with."""

    def __init__(self, client: DirectoryClient, *, directory: AppointmentDirectory | None = None) -> None:
        self._client = client
        self._directory = directory or default_directory(client)

    async def list(self, specialty: Optional[str] = None) -> DoctorListResponse:
        logger.info("Listing doctors (specialty=%s)", specialty)
        try:
            doctors = await self._directory.list_doctors()
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while listing doctors")
            raise ServiceError("Failed to fetch doctors", cause=exc)

        if specialty:
            wanted = specialty.strip().lower()
            doctors = [doctor for doctor in doctors if doctor.specialization.lower() == wanted]
        return DoctorListResponse(doctors=doctors)
