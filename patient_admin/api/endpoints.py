"""JSON endpoints for the patient admin service."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request

from patient_admin import __version__
from patient_admin.api.deps import get_config
from patient_admin.config import AppConfig
from patient_admin.models.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request, config: AppConfig = Depends(get_config)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
        fhir_base_url=config.fhir_base_url,
        active_sessions=request.app.state.session_manager.get_session_count(),
    )
