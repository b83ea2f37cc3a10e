"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from patient_admin import __version__
from patient_admin.api.deps import browser_session_middleware
from patient_admin.api.endpoints import router
from patient_admin.api.pages import router as pages_router
from patient_admin.clients.fhir import FHIRClient, FHIRConfig
from patient_admin.config import AppConfig
from patient_admin.services.patients_service import PatientsService
from patient_admin.services.session_manager import InMemorySessionManager
from patient_admin.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)


def create_app(config: AppConfig | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the application.

    Args:
        config: Application configuration (defaults to environment variables)
        transport: Optional transport for the FHIR client, e.g. a mock server in tests
    """
    config = config or AppConfig.from_env()
    setup_logging(LogConfig(level=config.log_level))

    fhir_client = FHIRClient(FHIRConfig(base_url=config.fhir_base_url), transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Patient admin {__version__} using FHIR server {config.fhir_base_url}")
        yield
        await fhir_client.aclose()

    app = FastAPI(
        title="Patient Admin",
        description="Administrative UI for listing, searching, creating, updating and deleting FHIR patients.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        tags_metadata=[
            {
                "name": "Patients",
                "description": "HTML pages for the patient list and the create/update form.",
            },
            {
                "name": "Health",
                "description": "Service health monitoring and status checks.",
            },
        ],
    )

    app.state.config = config
    app.state.patients_service = PatientsService(fhir_client)
    app.state.session_manager = InMemorySessionManager(
        session_timeout_minutes=config.session_timeout_minutes,
        query_stale_seconds=config.query_stale_seconds,
        search_debounce_seconds=config.search_debounce_seconds,
    )

    app.middleware("http")(browser_session_middleware)

    app.include_router(router)
    app.include_router(pages_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("patient_admin.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
