from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from maternity.auth import require_admin
from maternity.dependencies.services import (
    get_appointment_service,
    get_check_in_service,
    get_sweeper,
)
from maternity.schemas.appointment import (
    Appointment,
    AppointmentListRequest,
    AppointmentListResponse,
    AppointmentPatch,
    AppointmentStatus,
    AppointmentSummary,
    CheckInResponse,
    SweepResponse,
)
from maternity.services.appointments import AppointmentService
from maternity.services.checkin import CheckInService
from maternity.services.exceptions import ServiceError
from maternity.services.sweeper import MissedAppointmentSweeper

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/mark-missed", response_model=SweepResponse)
async def mark_missed(
    sweeper: MissedAppointmentSweeper = Depends(get_sweeper),
):
    try:
        return await sweeper.sweep()
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/{appointment_id}/checkin", response_model=CheckInResponse)
async def check_in(
    appointment_id: str,
    service: CheckInService = Depends(get_check_in_service),
):
    try:
        return await service.check_in(appointment_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    status: Optional[AppointmentStatus] = None,
    patient_name: Optional[str] = Query(None, alias="patientName"),
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    service: AppointmentService = Depends(get_appointment_service),
):
    request = AppointmentListRequest(
        status=status,
        patient_name=patient_name,
        doctor_id=doctor_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    try:
        return await service.list(request)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/{appointment_id}", response_model=AppointmentSummary)
async def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.get(appointment_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.put("/{appointment_id}", response_model=Appointment)
async def update_appointment(
    appointment_id: str,
    patch: AppointmentPatch,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.update(appointment_id, patch)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        await service.delete(appointment_id)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return {"success": True, "message": "Appointment deleted successfully"}
