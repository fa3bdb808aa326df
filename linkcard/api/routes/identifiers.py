"""Identifier Routes — normalize, batch-normalize and analyze LinkedIn profile references.

Invariants:
    - Every endpoint is rate-limited per client (identifier limiter)
    - Core Err results are raised as LinkCardError; the global handler renders them
    - Routes never contain business logic (delegate to IdentifierProcessor)
"""

from fastapi import APIRouter, Depends, Request

from linkcard.api.dependencies import client_id_from, get_identifier_processor
from linkcard.core.domain_types import Err
from linkcard.core.errors import error_from_detail
from linkcard.schemas.identifier import (
    AnalyzeRequest, BatchNormalizeRequest, NormalizeRequest,
)
from linkcard.services.identifier_processor import IdentifierProcessor

router = APIRouter(prefix="/api/v1/identifiers", tags=["identifiers"])


@router.post("/normalize")
async def normalize_identifier(
    body: NormalizeRequest,
    request: Request,
    processor: IdentifierProcessor = Depends(get_identifier_processor),
):
    """Canonical URL, username and suspicion profile for one raw input."""
    client_id = client_id_from(request)
    outcome = processor.process_url(client_id, body.input)
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id)
    return {"success": True, "data": outcome.value.to_dict()}


@router.post("/batch")
async def normalize_batch(
    body: BatchNormalizeRequest,
    request: Request,
    processor: IdentifierProcessor = Depends(get_identifier_processor),
):
    client_id = client_id_from(request)
    outcome = processor.process_batch(client_id, body.inputs)
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id)
    return {"success": True, **outcome.value}


@router.post("/analyze")
async def analyze_identifier(
    body: AnalyzeRequest,
    request: Request,
    processor: IdentifierProcessor = Depends(get_identifier_processor),
):
    """Risk score and recommendations for a URL as-is (no normalization)."""
    client_id = client_id_from(request)
    outcome = processor.analyze_url(client_id, body.url)
    if isinstance(outcome, Err):
        raise error_from_detail(outcome.error, client_id)
    profile, recommendations = outcome.value
    return {
        "success": True,
        "data": {**profile.to_dict(), "recommendations": recommendations},
    }
