"""Health check endpoints for monitoring application status."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

ROUTER_HEALTH = APIRouter(tags=["Health"])

SERVICE_NAME = "Ops Dashboard API"


@ROUTER_HEALTH.get(
    "/health",
    summary="Health check endpoint",
    description="Basic health check that returns application status and metadata",
    responses={
        status.HTTP_200_OK: {
            "description": "Application is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "timestamp": "2026-01-05T12:00:00.000000Z",
                        "service": SERVICE_NAME,
                        "version": "v1",
                        "database": "healthy",
                    }
                }
            },
        }
    },
)
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Reports the domain database state when a database is configured; the endpoint itself
    stays 200 so that load balancers do not restart the app over a database outage.
    """
    db_pool = getattr(request.app.state, "domain_db_pool", None)
    if db_pool is None:
        database = "not_configured"
    else:
        database = "healthy" if await db_pool.health_check() else "unhealthy"

    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": "v1",
        "database": database,
    }

    logger.debug("Health check requested", status="healthy", database=database)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response_data,
    )
