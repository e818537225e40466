from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from maternity.config import get_settings
from maternity.dependencies.services import get_directory_client_cached
from maternity.services.exceptions import ServiceError

# Import routers directly from submodules
from maternity.tools.appointments import router as appointments_router
from maternity.tools.booking import router as booking_router
from maternity.tools.dashboard import router as dashboard_router
from maternity.tools.doctors import public_router as public_doctors_router
from maternity.tools.doctors import router as doctors_router
from maternity.mcp_server import mcp
from maternity.health import router as health_router


def configure_logging() -> None:
    """Ensure application logs use the INFO level by default."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(logging.INFO)

# Configure logging as soon as the module is loaded
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    # --- Startup Logic ---
    settings = get_settings()

    settings_snapshot = settings.model_dump(
        exclude={"directory_token", "jwt_secret"},
    )
    logger.info("Application settings on startup: %s", settings_snapshot)

    client = get_directory_client_cached()
    logger.info("Application startup complete (mock data: %s).", client.use_mock_data)

    try:
        async with mcp.session_manager.run():
            yield  # The application is now running
    finally:
        # --- Shutdown Logic ---
        logger.info("Closing document service connection.")
        await client.close()
        logger.info("Application shutdown complete.")


def _error_body(detail) -> dict:
    if isinstance(detail, dict):
        return {"success": False, **detail}
    return {"success": False, "error": str(detail)}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    # Errors raised by dependencies (e.g. the admin session check) end up here.
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))


# --- Application Setup ---

settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(ServiceError, service_error_handler)

# --- Include Routers and Mounts ---

app.include_router(appointments_router, prefix="/admin/appointments")
app.include_router(doctors_router, prefix="/admin/doctors")
app.include_router(dashboard_router, prefix="/admin")
app.include_router(booking_router, prefix="/appointments")
app.include_router(public_doctors_router, prefix="/doctors")
app.include_router(health_router)

# Mount the MCP Streamable HTTP server at /mcp
app.mount("/mcp", mcp.streamable_http_app())
