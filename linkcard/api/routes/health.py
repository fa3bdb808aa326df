"""Health Probe — liveness endpoint for container orchestration.

Invariants:
    - GET /health/ always returns 200 if the process is up
    - Reports artifact cache occupancy (no external dependencies to probe)
"""

from fastapi import APIRouter, Depends, status

from linkcard.api.dependencies import get_artifact_cache
from linkcard.services.artifact_cache import ArtifactCache

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(cache: ArtifactCache = Depends(get_artifact_cache)):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "linkcard-api",
        "version": "0.1.0",
        "cache": {"size": len(cache), "maxSize": cache.max_size},
    }
