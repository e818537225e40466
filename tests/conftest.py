from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict
from zoneinfo import ZoneInfo

import pytest

from maternity.schemas.appointment import Appointment, AppointmentStatus
from maternity.schemas.doctor import Doctor, Patient
from maternity.services.mock_store import InMemoryDirectory, reset_mock_store

LAGOS = ZoneInfo("Africa/Lagos")
FIXED_NOW = datetime(2026, 3, 10, 9, 30, tzinfo=LAGOS)
TODAY = FIXED_NOW.replace(hour=0, minute=0)


class MockLatencyClient:
    """Client stub that records simulate_latency calls."""

    def __init__(self) -> None:
        self.use_mock_data = True
        self.latency_called = False

    async def simulate_latency(self) -> None:
        self.latency_called = True


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def _reset_store() -> None:
    reset_mock_store()
    yield
    reset_mock_store()


@pytest.fixture
def client() -> MockLatencyClient:
    return MockLatencyClient()


@pytest.fixture
def directory() -> InMemoryDirectory:
    store = InMemoryDirectory(seed=False, now=fixed_clock)
    store.add_doctor(
        Doctor(
            id="DOC-A",
            first_name="Aisha",
            last_name="Abdullahi",
            specialization="Obstetrics",
            working_hours="09:00-17:00",
        )
    )
    store.add_doctor(
        Doctor(
            id="DOC-B",
            first_name="Fatima",
            last_name="Ibrahim",
            specialization="Gynecology",
            working_hours="9:00 AM - 1:00 PM",
            consultation_duration=45,
        )
    )
    store.add_patient(Patient(id="PAT-1", first_name="Sarah", last_name="Johnson"))
    store.add_patient(Patient(id="PAT-2", first_name="Amina", last_name="Bello"))
    store.add_patient(Patient(id="PAT-3", first_name="Grace", last_name="Okafor"))
    return store


def add_appointment(
    directory: InMemoryDirectory,
    *,
    day_offset: int = 0,
    time: str = "10:00 AM",
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    patient_id: str = "PAT-1",
    doctor_id: str = "DOC-A",
    **extra: Any,
) -> Appointment:
    fields: Dict[str, Any] = {
        "patient_id": patient_id,
        "doctor_id": doctor_id,
        "appointment_type": "Prenatal Checkup",
        "appointment_date": TODAY + timedelta(days=day_offset),
        "appointment_time": time,
        "status": status,
        **extra,
    }
    return asyncio.run(directory.create_appointment(fields))
