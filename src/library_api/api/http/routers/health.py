"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.library_api.api.http.app_data import ApplicationDependencies
from src.library_api.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {"status": "healthy"}


@router.get("/ready", response_model=None)
def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers ``SELECT 1``, 503 otherwise."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    db_healthy = app_deps.database_service.health_check()
    response = {
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": "sqlite" if config.database.is_sqlite else "postgresql",
            }
        },
    }

    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response
