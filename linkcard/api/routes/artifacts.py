"""Artifact Routes — rate-limited, cached QR generation plus cache maintenance.

Invariants:
    - Generation endpoints share the artifact limiter (60/min by default)
    - Batch size checked before the limiter (oversized batch → 413, no slot used)
    - Responses carry fromCache and cacheKey next to the artifact
    - GET /generate takes config as a JSON-encoded query parameter

Design Decisions:
    - optimize=true delegates to generate_optimized (content-based error correction)
"""

import json

from fastapi import APIRouter, Depends, Query, Request

from linkcard.api.dependencies import (
    client_id_from, get_artifact_cache, get_artifact_processor,
)
from linkcard.core.domain_types import Err
from linkcard.core.errors import (
    ErrorContext, ErrorDetail, INVALID_CONFIG, InvalidInputError,
    error_from_detail,
)
from linkcard.core.validation import validate_generation_request
from linkcard.schemas.renderer import BatchGenerationRequest, GenerationRequest
from linkcard.services.artifact_cache import ArtifactCache
from linkcard.services.artifact_processor import (
    ArtifactProcessor, cached_result_to_dict,
)

router = APIRouter(prefix="/api/v1/artifacts", tags=["artifacts"])


async def _generate(
    processor: ArtifactProcessor, client_id: str,
    body: GenerationRequest, optimize: bool,
) -> dict:
    if optimize:
        outcome = await processor.generate_optimized(client_id, body)
        if isinstance(outcome, Err):
            raise error_from_detail(outcome.error, client_id)
        return {
            "success": True,
            "data": cached_result_to_dict(outcome.value.cached),
            "analysis": outcome.value.analysis.to_dict(),
        }

    outcome = await processor.generate(client_id, body)
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id)
    return {"success": True, "data": cached_result_to_dict(outcome.value)}


@router.post("/generate")
async def generate_artifact(
    body: GenerationRequest,
    request: Request,
    optimize: bool = Query(False),
    processor: ArtifactProcessor = Depends(get_artifact_processor),
):
    """Render (or serve from cache) a QR code for the given content."""
    return await _generate(processor, client_id_from(request), body, optimize)


@router.get("/generate")
async def generate_artifact_from_query(
    request: Request,
    content: str = Query(...),
    config: str | None = Query(None),
    optimize: bool = Query(False),
    processor: ArtifactProcessor = Depends(get_artifact_processor),
):
    client_id = client_id_from(request)
    try:
        parsed_config = json.loads(config) if config else None
    except json.JSONDecodeError:
        raise InvalidInputError(
            "config must be a JSON object", INVALID_CONFIG,
            ErrorContext(client_id=client_id, path=("config",)),
        )
    validated = validate_generation_request(
        {"content": content, "config": parsed_config},
    )
    if isinstance(validated, Err):
        raise error_from_detail(
            ErrorDetail.from_field_errors(validated.error), client_id,
        )
    return await _generate(processor, client_id, validated.value, optimize)


@router.post("/batch")
async def generate_batch(
    body: BatchGenerationRequest,
    request: Request,
    processor: ArtifactProcessor = Depends(get_artifact_processor),
):
    client_id = client_id_from(request)
    outcome = await processor.generate_batch(client_id, body.requests)
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id)
    return {"success": True, **outcome.value}


@router.get("/cache/stats")
async def cache_stats(cache: ArtifactCache = Depends(get_artifact_cache)):
    return {"success": True, "data": cache.stats().to_dict()}


@router.delete("/cache")
async def clear_cache(cache: ArtifactCache = Depends(get_artifact_cache)):
    cleared = cache.clear()
    return {"success": True, "data": {"cleared": cleared}}
