"""Health check response model."""

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
    fhir_base_url: str
    active_sessions: int
