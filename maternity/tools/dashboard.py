from fastapi import APIRouter, Depends, HTTPException

from maternity.auth import require_admin
from maternity.dependencies.services import get_dashboard_service
from maternity.schemas.stats import DashboardResponse
from maternity.services.exceptions import ServiceError
from maternity.services.stats import DashboardService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=DashboardResponse)
async def stats(
    service: DashboardService = Depends(get_dashboard_service),
):
    try:
        return await service.stats()
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    service: DashboardService = Depends(get_dashboard_service),
):
    try:
        return await service.dashboard()
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
