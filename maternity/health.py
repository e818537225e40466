# maternity/health.py
from datetime import datetime

from fastapi import APIRouter, Depends

from maternity.clients.directory import DirectoryClient
from maternity.config import Settings, get_settings
from maternity.dependencies.services import get_directory_client

router = APIRouter()


@router.get("/health")
def health(
    settings: Settings = Depends(get_settings),
    client: DirectoryClient = Depends(get_directory_client),
):
    return {
        "ok": True,
        "mock_data": client.use_mock_data,
        "timezone": settings.timezone,
        "clinic_time": datetime.now(settings.tzinfo).isoformat(),
    }


@router.get("/mcp/info")
def mcp_info():
    return {
        "transport": "streamable-http",
        "path": "/mcp",
        "tools": ["appointments_check_in", "appointments_mark_missed", "doctor_schedules", "ping"],
    }
