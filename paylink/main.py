"""Main FastAPI application for the payment collection orchestrator."""

import time

from fastapi import FastAPI

from paylink.api.collection import router as collection_router
from paylink.api.health import router as health_router
from paylink.core.config import get_settings
from paylink.core.dependencies import get_orchestrator, get_session_store
from paylink.core.logging import get_logger, mask_secret, setup_logging
from paylink.core.middleware import CorrelationIDMiddleware

settings = get_settings()

# Initialize logging
setup_logging(settings.log_level)
logger = get_logger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Collects payments through open-banking account verification and payment initiation",
    version=settings.version,
    docs_url=None,
    openapi_url=None,
    redoc_url=None,
)

app.add_middleware(CorrelationIDMiddleware)

# Include routers
app.include_router(collection_router)
app.include_router(health_router, tags=["health"])


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    app.state.start_time = time.time()
    logger.info(
        "Starting payment collection orchestrator",
        version=settings.version,
        port=settings.port,
        client_id=mask_secret(settings.tink_client_id, visible=20),
        api_host=settings.tink_api_host,
        default_market=settings.default_market,
        default_currency=settings.default_currency,
        smtp_user=settings.smtp_username,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Let pending payment emails finish before exiting."""
    logger.info("Shutting down payment collection orchestrator")
    await get_orchestrator().wait_for_background_tasks()
    purged = get_session_store().purge_expired()
    logger.info("Shutdown complete", expired_sessions_purged=purged)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "paylink.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
