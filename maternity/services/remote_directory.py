from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic_core import to_jsonable_python

from maternity.clients.directory import DirectoryClient
from maternity.schemas.appointment import Appointment
from maternity.schemas.doctor import Doctor, Patient
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import ConflictError

logger = logging.getLogger(__name__)


class RemoteDirectory(AppointmentDirectory):
    """Directory backed by the document service over HTTP.

    Conditional updates are sent with an ``expect`` document and the service
    answers 409 when it does not match. Counters are incremented server side.
    """

    def __init__(self, client: DirectoryClient) -> None:
        self._client = client

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        status, body = await self._client.request(
            "GET", f"/appointments/{quote(appointment_id)}", allow_status=(404,)
        )
        if status == 404:
            return None
        return Appointment.model_validate(body)

    async def find_appointments(self, query: AppointmentQuery) -> List[Appointment]:
        body = await self._client.post("/appointments/query", query.model_dump(mode="json"))
        return [Appointment.model_validate(item) for item in body.get("items", [])]

    async def count_appointments(self, query: AppointmentQuery) -> int:
        body = await self._client.post(
            "/appointments/count",
            query.model_dump(mode="json", exclude={"order_by", "descending", "offset", "limit"}),
        )
        return int(body["count"])

    async def create_appointment(self, fields: Dict[str, Any]) -> Appointment:
        body = await self._client.post("/appointments", to_jsonable_python(fields))
        return Appointment.model_validate(body)

    async def update_appointment(
        self,
        appointment_id: str,
        changes: Dict[str, Any],
        *,
        expect: Dict[str, Any] | None = None,
    ) -> Optional[Appointment]:
        payload: Dict[str, Any] = {"changes": to_jsonable_python(changes)}
        if expect:
            payload["expect"] = to_jsonable_python(expect)
        status, body = await self._client.request(
            "PATCH",
            f"/appointments/{quote(appointment_id)}",
            payload=payload,
            allow_status=(404, 409),
        )
        if status == 404:
            return None
        if status == 409:
            logger.info("Conditional update of %s rejected: %s", appointment_id, expect)
            raise ConflictError("Precondition failed")
        return Appointment.model_validate(body)

    async def delete_appointment(self, appointment_id: str) -> bool:
        status, _ = await self._client.request(
            "DELETE", f"/appointments/{quote(appointment_id)}", allow_status=(404,)
        )
        return status != 404

    async def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        status, body = await self._client.request(
            "GET", f"/doctors/{quote(doctor_id)}", allow_status=(404,)
        )
        if status == 404:
            return None
        return Doctor.model_validate(body)

    async def list_doctors(self, *, available_only: bool = False) -> List[Doctor]:
        body = await self._client.post("/doctors/query", {"available_only": available_only})
        doctors = [Doctor.model_validate(item) for item in body.get("items", [])]
        return sorted(doctors, key=lambda doctor: doctor.first_name)

    async def count_doctors(self) -> int:
        body = await self._client.get("/doctors/count")
        return int(body["count"])

    async def get_patient(self, patient_id: str) -> Optional[Patient]:
        status, body = await self._client.request(
            "GET", f"/patients/{quote(patient_id)}", allow_status=(404,)
        )
        if status == 404:
            return None
        return Patient.model_validate(body)

    async def get_patients(self, patient_ids: List[str]) -> Dict[str, Patient]:
        if not patient_ids:
            return {}
        body = await self._client.post("/patients/batch", {"ids": sorted(set(patient_ids))})
        patients = [Patient.model_validate(item) for item in body.get("items", [])]
        return {patient.id: patient for patient in patients}

    async def count_patients(self) -> int:
        body = await self._client.get("/patients/count")
        return int(body["count"])

    async def increment_counter(self, key: str, *, initial: int = 0) -> int:
        body = await self._client.post(
            f"/counters/{quote(key)}/increment", {"initial": initial}
        )
        return int(body["value"])


def default_directory(client: DirectoryClient) -> AppointmentDirectory:
    """Pick the in-memory store in mock mode, the document service otherwise."""

    if client.use_mock_data:
        from maternity.services.mock_store import get_mock_store

        return get_mock_store()
    return RemoteDirectory(client)
