from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from maternity.schemas.appointment import Appointment, AppointmentStatus
from maternity.schemas.doctor import Doctor, Patient


class AppointmentQuery(BaseModel):
    """Filter, ordering and paging for appointment lookups.

    Date bounds: ``date_gte`` inclusive, ``date_lt`` exclusive, ``date_lte``
    inclusive. ``check_in_*`` bounds apply to ``check_in_time``.
    """

    status_in: Optional[List[AppointmentStatus]] = None
    checked_in: Optional[bool] = None
    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    date_gte: Optional[datetime] = None
    date_lt: Optional[datetime] = None
    date_lte: Optional[datetime] = None
    check_in_gte: Optional[datetime] = None
    check_in_lt: Optional[datetime] = None
    patient_name: Optional[str] = None
    order_by: Optional[Literal["appointment_date", "appointment_time", "created_at"]] = None
    descending: bool = False
    offset: int = 0
    limit: Optional[int] = None


class AppointmentDirectory(ABC):
    """Persistent store of appointments, doctors and patients.

    ``update_appointment`` accepts an ``expect`` mapping of field values that
    must hold at write time; a mismatch raises ``ConflictError``.
    ``increment_counter`` atomically creates the counter at ``initial`` when
    absent, then increments it and returns the new value.
    """

    @abstractmethod
    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def find_appointments(self, query: AppointmentQuery) -> List[Appointment]:
        ...

    @abstractmethod
    async def count_appointments(self, query: AppointmentQuery) -> int:
        ...

    @abstractmethod
    async def create_appointment(self, fields: Dict[str, Any]) -> Appointment:
        ...

    @abstractmethod
    async def update_appointment(
        self,
        appointment_id: str,
        changes: Dict[str, Any],
        *,
        expect: Dict[str, Any] | None = None,
    ) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def delete_appointment(self, appointment_id: str) -> bool:
        ...

    @abstractmethod
    async def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        ...

    @abstractmethod
    async def list_doctors(self, *, available_only: bool = False) -> List[Doctor]:
        ...

    @abstractmethod
    async def count_doctors(self) -> int:
        ...

    @abstractmethod
    async def get_patient(self, patient_id: str) -> Optional[Patient]:
        ...

    @abstractmethod
    async def get_patients(self, patient_ids: List[str]) -> Dict[str, Patient]:
        ...

    @abstractmethod
    async def count_patients(self) -> int:
        ...

    @abstractmethod
    async def increment_counter(self, key: str, *, initial: int = 0) -> int:
        ...
