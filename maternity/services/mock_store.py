from __future__ import annotations

import asyncio
import itertools
import weakref
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from maternity.config import clinic_now
from maternity.schemas.appointment import Appointment, AppointmentStatus
from maternity.schemas.doctor import Doctor, Patient
from maternity.services.directory import AppointmentDirectory, AppointmentQuery
from maternity.services.exceptions import ConflictError
from maternity.services.slots import time_of_day_minutes


class _BaseRepository:
    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter):05d}"


class InMemoryDirectory(_BaseRepository, AppointmentDirectory):
    """Directory kept in process memory.

    Every call yields to the event loop once so that interleavings seen
    against a networked store also show up in tests. Conditional updates and
    counters run under a lock.
    """

    def __init__(
        self,
        *,
        seed: bool = True,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__("APT")
        self._now = now or clinic_now
        self._appointments: Dict[str, Appointment] = {}
        self._doctors: Dict[str, Doctor] = {}
        self._patients: Dict[str, Patient] = {}
        self._counters: Dict[str, int] = {}
        self._number_counter = itertools.count(1)
        self._locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
        if seed:
            self._seed_defaults()

    def _lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        # One lock per event loop; tests drive the store from several loops.
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        return lock

    @staticmethod
    async def _pause() -> None:
        await asyncio.sleep(0)

    def _seed_defaults(self) -> None:
        for doctor in [
            Doctor(
                id="DOC-001",
                first_name="Aisha",
                last_name="Abdullahi",
                specialization="Obstetrics",
                working_hours="09:00-17:00",
                consultation_duration=30,
            ),
            Doctor(
                id="DOC-002",
                first_name="Fatima",
                last_name="Ibrahim",
                specialization="Gynecology",
                working_hours="9:00 AM - 1:00 PM",
                consultation_duration=45,
            ),
            Doctor(
                id="DOC-003",
                first_name="Michael",
                last_name="Chen",
                specialization="Pediatrics",
                working_hours="10:00-16:00",
                is_on_leave=True,
            ),
        ]:
            self.add_doctor(doctor)

        for patient in [
            Patient(id="PAT-001", first_name="Sarah", last_name="Johnson", email="sarah@example.com", phone="+234 801 000 0001"),
            Patient(id="PAT-002", first_name="Amina", last_name="Bello", email="amina@example.com", phone="+234 801 000 0002"),
            Patient(id="PAT-003", first_name="Grace", last_name="Okafor", email="grace@example.com", phone="+234 801 000 0003"),
        ]:
            self.add_patient(patient)

        today = self._now().replace(hour=0, minute=0, second=0, microsecond=0)
        seeds = [
            ("PAT-001", "DOC-001", "Prenatal Checkup", today, "10:00 AM", AppointmentStatus.CONFIRMED),
            ("PAT-002", "DOC-001", "Ultrasound", today, "02:30 PM", AppointmentStatus.SCHEDULED),
            ("PAT-003", "DOC-002", "Postnatal Review", today + timedelta(days=1), "09:30 AM", AppointmentStatus.SCHEDULED),
            ("PAT-002", "DOC-002", "Prenatal Checkup", today - timedelta(days=3), "11:00 AM", AppointmentStatus.COMPLETED),
        ]
        for patient_id, doctor_id, kind, day, slot, status in seeds:
            self._insert(
                {
                    "patient_id": patient_id,
                    "doctor_id": doctor_id,
                    "appointment_type": kind,
                    "appointment_date": day,
                    "appointment_time": slot,
                    "status": status,
                }
            )

    def add_doctor(self, doctor: Doctor) -> None:
        self._doctors[doctor.id] = doctor

    def add_patient(self, patient: Patient) -> None:
        self._patients[patient.id] = patient

    def iter_appointments(self) -> Iterable[Appointment]:
        return list(self._appointments.values())

    def _insert(self, fields: Dict[str, Any]) -> Appointment:
        now = self._now()
        appointment_id = self._next_id()
        record = Appointment(
            **{
                "id": appointment_id,
                "appointment_number": f"MAT-{now.year}-{next(self._number_counter):04d}",
                "created_at": now,
                "updated_at": now,
                **fields,
            }
        )
        self._appointments[appointment_id] = record
        return record.model_copy(deep=True)

    def _matches(self, record: Appointment, query: AppointmentQuery) -> bool:
        if query.status_in is not None and record.status not in query.status_in:
            return False
        if query.checked_in is not None and record.checked_in != query.checked_in:
            return False
        if query.doctor_id is not None and record.doctor_id != query.doctor_id:
            return False
        if query.patient_id is not None and record.patient_id != query.patient_id:
            return False
        if query.date_gte is not None and record.appointment_date < query.date_gte:
            return False
        if query.date_lt is not None and record.appointment_date >= query.date_lt:
            return False
        if query.date_lte is not None and record.appointment_date > query.date_lte:
            return False
        if query.check_in_gte is not None or query.check_in_lt is not None:
            if record.check_in_time is None:
                return False
            if query.check_in_gte is not None and record.check_in_time < query.check_in_gte:
                return False
            if query.check_in_lt is not None and record.check_in_time >= query.check_in_lt:
                return False
        if query.patient_name:
            patient = self._patients.get(record.patient_id)
            needle = query.patient_name.lower()
            if patient is None or (
                needle not in patient.first_name.lower() and needle not in patient.last_name.lower()
            ):
                return False
        return True

    @staticmethod
    def _sort_key(field: str) -> Callable[[Appointment], Any]:
        if field == "appointment_time":
            def by_time(record: Appointment) -> Any:
                minutes = time_of_day_minutes(record.appointment_time)
                return (minutes is None, minutes or 0, record.appointment_time)
            return by_time
        return lambda record: getattr(record, field)

    def _select(self, query: AppointmentQuery) -> List[Appointment]:
        rows = [record for record in self._appointments.values() if self._matches(record, query)]
        if query.order_by:
            rows.sort(key=self._sort_key(query.order_by), reverse=query.descending)
        return rows

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        await self._pause()
        record = self._appointments.get(appointment_id)
        return record.model_copy(deep=True) if record is not None else None

    async def find_appointments(self, query: AppointmentQuery) -> List[Appointment]:
        await self._pause()
        rows = self._select(query)
        end = query.offset + query.limit if query.limit is not None else None
        return [record.model_copy(deep=True) for record in rows[query.offset:end]]

    async def count_appointments(self, query: AppointmentQuery) -> int:
        await self._pause()
        return len(self._select(query))

    async def create_appointment(self, fields: Dict[str, Any]) -> Appointment:
        await self._pause()
        return self._insert(fields)

    async def update_appointment(
        self,
        appointment_id: str,
        changes: Dict[str, Any],
        *,
        expect: Dict[str, Any] | None = None,
    ) -> Optional[Appointment]:
        async with self._lock():
            await self._pause()
            record = self._appointments.get(appointment_id)
            if record is None:
                return None
            for field, expected in (expect or {}).items():
                if getattr(record, field) != expected:
                    raise ConflictError(f"Precondition failed on '{field}'")
            updated = Appointment.model_validate({**record.model_dump(), **changes})
            self._appointments[appointment_id] = updated
            return updated.model_copy(deep=True)

    async def delete_appointment(self, appointment_id: str) -> bool:
        await self._pause()
        return self._appointments.pop(appointment_id, None) is not None

    async def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        await self._pause()
        return self._doctors.get(doctor_id)

    async def list_doctors(self, *, available_only: bool = False) -> List[Doctor]:
        await self._pause()
        doctors = [
            doctor
            for doctor in self._doctors.values()
            if not available_only or (doctor.is_accepting_patients and not doctor.is_on_leave)
        ]
        return sorted(doctors, key=lambda doctor: doctor.first_name)

    async def count_doctors(self) -> int:
        await self._pause()
        return len(self._doctors)

    async def get_patient(self, patient_id: str) -> Optional[Patient]:
        await self._pause()
        return self._patients.get(patient_id)

    async def get_patients(self, patient_ids: List[str]) -> Dict[str, Patient]:
        await self._pause()
        return {pid: self._patients[pid] for pid in patient_ids if pid in self._patients}

    async def count_patients(self) -> int:
        await self._pause()
        return len(self._patients)

    async def increment_counter(self, key: str, *, initial: int = 0) -> int:
        async with self._lock():
            await self._pause()
            value = self._counters.get(key, initial) + 1
            self._counters[key] = value
            return value


_mock_store: Optional[InMemoryDirectory] = None


def get_mock_store() -> InMemoryDirectory:
    global _mock_store
    if _mock_store is None:
        _mock_store = InMemoryDirectory()
    return _mock_store


def reset_mock_store() -> None:
    global _mock_store
    _mock_store = None
