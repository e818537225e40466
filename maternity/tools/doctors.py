from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from maternity.auth import require_admin
from maternity.dependencies.services import get_doctor_service, get_schedule_service
from maternity.schemas.doctor import DoctorListResponse, DoctorScheduleResponse
from maternity.services.doctors import DoctorService
from maternity.services.exceptions import ServiceError
from maternity.services.schedule import DoctorScheduleService

router = APIRouter(dependencies=[Depends(require_admin)])
public_router = APIRouter()


@router.get("/schedule", response_model=DoctorScheduleResponse)
async def doctor_schedules(
    date: Optional[date_type] = Query(None, description="YYYY-MM-DD, defaults to today"),
    service: DoctorScheduleService = Depends(get_schedule_service),
):
    try:
        return await service.schedules(date)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@public_router.get("", response_model=DoctorListResponse)
async def list_doctors(
    specialty: Optional[str] = Query(None, description="Specialization, e.g. 'Obstetrics'"),
    service: DoctorService = Depends(get_doctor_service),
):
    try:
        return await service.list(specialty)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
