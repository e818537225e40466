from fastapi import APIRouter, Depends, HTTPException, Query

from maternity.dependencies.services import get_appointment_service
from maternity.schemas.appointment import Appointment, BookingRequest, PatientAppointmentsResponse
from maternity.services.appointments import AppointmentService
from maternity.services.exceptions import ServiceError

router = APIRouter()


@router.post("", response_model=Appointment)
async def book_appointment(
    req: BookingRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.book(req)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=PatientAppointmentsResponse)
async def patient_appointments(
    patient_id: str = Query(..., alias="patientId"),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.for_patient(patient_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
