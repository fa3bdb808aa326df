"""Artifact Processor — rate-limited, cached QR generation for single and batch requests.

Invariants:
    - Every entry point returns Ok/Err, never raises for expected failures
    - Batch size is checked BEFORE the rate limiter: an oversized batch costs no slot
    - One rate-limit slot per call (a batch counts once)
    - One bad batch item fails alone; the rest still render
    - Renders go through ArtifactCache.get_or_generate (failures never cached)

Design Decisions:
    - render_fn injected: QrRenderer in production, an AsyncMock in tests
    - generate_optimized fills in the recommended error-correction level only when
      the caller did not pick one
"""

import logging
from dataclasses import dataclass

from linkcard.core.content_analysis import ContentAnalysis, analyze_content
from linkcard.core.domain_types import Err, Ok, Result
from linkcard.core.errors import ErrorDetail
from linkcard.core.validation import validate_generation_request
from linkcard.schemas.renderer import (
    GenerationRequest, RendererConfig, RendererConfigUpdate,
)
from linkcard.services.artifact_cache import ArtifactCache, CachedResult, RenderFn
from linkcard.services.rate_limiter import (
    FixedWindowRateLimiter, batch_size_detail, rate_limit_detail,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 20


@dataclass(frozen=True)
class OptimizedResult:
    cached: CachedResult
    analysis: ContentAnalysis


def cached_result_to_dict(cached: CachedResult) -> dict:
    return {
        **cached.result.model_dump(mode="json", by_alias=True),
        "fromCache": cached.from_cache,
        "cacheKey": cached.cache_key,
    }


class ArtifactProcessor:
    """Admission control + cache in front of the renderer."""

    def __init__(
        self,
        cache: ArtifactCache,
        render_fn: RenderFn,
        limiter: FixedWindowRateLimiter,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        self.cache = cache
        self.render_fn = render_fn
        self.limiter = limiter
        self.max_batch_size = max_batch_size

    def _admit(self, client_id: str) -> ErrorDetail | None:
        decision = self.limiter.check(client_id)
        return None if decision.allowed else rate_limit_detail(decision)

    async def _render(
        self, content: str, update: RendererConfigUpdate | None,
    ) -> Result[CachedResult, ErrorDetail]:
        config = RendererConfig().with_update(update)
        return await self.cache.get_or_generate(content, config, self.render_fn)

    async def generate(
        self, client_id: str, request: GenerationRequest,
    ) -> Result[CachedResult, ErrorDetail]:
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)
        return await self._render(request.content, request.config)

    async def generate_optimized(
        self, client_id: str, request: GenerationRequest,
    ) -> Result[OptimizedResult, ErrorDetail]:
        """Generate with the error-correction level recommended for the content."""
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)

        analysis = analyze_content(request.content)
        update = request.config or RendererConfigUpdate()
        if update.error_correction_level is None and analysis.recommended_level:
            update = update.model_copy(
                update={"error_correction_level": analysis.recommended_level},
            )
        rendered = await self._render(request.content, update)
        if isinstance(rendered, Err):
            return rendered
        return Ok(OptimizedResult(rendered.value, analysis))

    async def generate_batch(
        self, client_id: str, items: list[dict],
    ) -> Result[dict, ErrorDetail]:
        """Validate and render each item independently."""
        if len(items) > self.max_batch_size:
            return Err(batch_size_detail(self.max_batch_size))
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)

        results = []
        for index, item in enumerate(items):
            outcome = await self._generate_item(item)
            if isinstance(outcome, Ok):
                results.append({
                    "index": index, "success": True,
                    "data": cached_result_to_dict(outcome.value),
                })
            else:
                results.append({
                    "index": index, "success": False,
                    "error": outcome.error.to_dict(),
                })

        successful = [r for r in results if r["success"]]
        logger.info(
            f"Batch generation: {len(successful)}/{len(items)} succeeded",
            extra={"client_id": client_id},
        )
        return Ok({
            "results": results,
            "summary": {
                "total": len(items),
                "successful": len(successful),
                "failed": len(results) - len(successful),
                "fromCache": sum(1 for r in successful if r["data"]["fromCache"]),
            },
        })

    async def _generate_item(self, item: dict) -> Result[CachedResult, ErrorDetail]:
        validated = validate_generation_request(item)
        if isinstance(validated, Err):
            return Err(ErrorDetail.from_field_errors(validated.error))
        request = validated.value
        return await self._render(request.content, request.config)
