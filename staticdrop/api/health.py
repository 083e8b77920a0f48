"""Health check endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from staticdrop.core.logger import LogIcon, logger
from staticdrop.core.settings import settings as st

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return HealthResponse(status="healthy", service=st.API_NAME, version=st.API_VERSION)
