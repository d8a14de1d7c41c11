"""Health check API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from provider_validation.core.config import settings
from provider_validation.core.database import DatabaseClient, get_db_client
from provider_validation.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Health check status")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    database: dict = Field(default_factory=dict, description="Store health details")


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    description="Check if the service is running and its store is reachable",
    operation_id="get_service_health_status",
)
async def health_check(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
) -> HealthCheckResponse:
    """Health check endpoint."""
    db_health = await db_client.health_check()
    if db_health["status"] != "healthy":
        LOGGER.warning("Store is unhealthy", extra={"error": db_health.get("error")})

    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health,
    )
