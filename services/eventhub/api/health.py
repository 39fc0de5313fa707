"""
Health check endpoints for the EventHub authorization service.

Provides /health (liveness) and /ready (readiness) endpoints.
"""

from fastapi import APIRouter, Depends, Response, status

from eventhub.api.dependencies import get_store
from eventhub.auth.credential_store import CredentialStore
from eventhub.logging_config import get_logger

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "healthy"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def ready(
    response: Response,
    store: CredentialStore = Depends(get_store),
) -> dict[str, str | dict[str, str]]:
    """Readiness probe endpoint.

    The service is ready once its credential store answers.
    """
    checks = {"credential_store": "healthy" if await store.health() else "unhealthy"}

    if not all(v == "healthy" for v in checks.values()):
        logger.warning("Readiness check failed", checks=checks)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not ready", "checks": checks}

    return {"status": "ready", "checks": checks}
