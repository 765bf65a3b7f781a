"""
Health check endpoint for the payment collection orchestrator.
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from paylink.core.config import settings
from paylink.core.dependencies import get_session_store
from paylink.core.logging import get_logger
from paylink.services.session_store import InMemorySessionStore

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    service_name: str
    uptime_seconds: float
    timestamp: datetime
    active_sessions: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    session_store: InMemorySessionStore = Depends(get_session_store),
):
    """
    Basic health check endpoint.

    Returns service status, version, uptime and the number of live sessions.
    """
    start_time = getattr(request.app.state, "start_time", time.time())

    response = HealthResponse(
        status="healthy",
        version=settings.version,
        service_name=settings.app_name,
        uptime_seconds=round(time.time() - start_time, 3),
        timestamp=datetime.now(timezone.utc),
        active_sessions=session_store.count(),
    )

    logger.info(
        "Health check completed",
        status=response.status,
        active_sessions=response.active_sessions,
    )
    return response
