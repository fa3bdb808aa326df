"""Artifact Processor — admission control and batch handling around the cache.

Tests cover:
    - Single generation merges partial config over defaults
    - Rate limit rejection carries retryAfter=60 and skips rendering
    - Oversized batch rejected before consuming a rate-limit slot
    - One invalid batch item fails alone
    - generate_optimized applies the recommended level unless one was given
"""

from linkcard.core.domain_types import Err, ErrorCorrectionLevel, Ok
from linkcard.schemas.renderer import GenerationRequest, RendererConfigUpdate

CONTENT = "https://linkedin.com/in/john-doe"


async def test_generate_merges_partial_config(artifact_processor, render_fn):
    request = GenerationRequest(content=CONTENT, config=RendererConfigUpdate(size=512))
    result = await artifact_processor.generate("c1", request)

    assert isinstance(result, Ok)
    _, config = render_fn.await_args.args
    assert config.size == 512
    assert config.margin == 4
    assert result.value.result.dimensions.width == 512


async def test_generate_rejects_over_rate_limit(artifact_processor, render_fn):
    request = GenerationRequest(content=CONTENT)
    for _ in range(3):
        await artifact_processor.generate("c1", request)

    rejected = await artifact_processor.generate("c1", request)

    assert isinstance(rejected, Err)
    assert rejected.error.code == "rate_limit_exceeded"
    assert rejected.error.extra["retryAfter"] == 60
    assert render_fn.await_count == 1


async def test_oversized_batch_does_not_consume_a_slot(artifact_processor):
    items = [{"content": CONTENT}] * 3
    result = await artifact_processor.generate_batch("c1", items)

    assert isinstance(result, Err)
    assert result.error.code == "batch_size_exceeded"
    assert result.error.extra["maxBatchSize"] == 2
    assert artifact_processor.limiter.remaining("c1") == 3


async def test_batch_item_failures_are_isolated(artifact_processor):
    result = await artifact_processor.generate_batch(
        "c1", [{"content": CONTENT}, {"content": CONTENT, "config": {"size": 5}}],
    )

    batch = result.value
    assert [r["success"] for r in batch["results"]] == [True, False]
    assert batch["results"][1]["error"]["path"] == ["config", "size"]
    assert batch["summary"] == {
        "total": 2, "successful": 1, "failed": 1, "fromCache": 0,
    }
    assert artifact_processor.limiter.remaining("c1") == 2


async def test_batch_reports_cache_hits(artifact_processor, render_fn):
    await artifact_processor.generate("c1", GenerationRequest(content=CONTENT))
    result = await artifact_processor.generate_batch(
        "c1", [{"content": CONTENT}, {"content": "hello world"}],
    )
    assert result.value["summary"]["fromCache"] == 1
    assert render_fn.await_count == 2


async def test_optimized_uses_recommended_level(artifact_processor, render_fn):
    result = await artifact_processor.generate_optimized(
        "c1", GenerationRequest(content=CONTENT),
    )
    _, config = render_fn.await_args.args
    assert config.error_correction_level == ErrorCorrectionLevel.HIGH
    assert result.value.analysis.recommended_level == ErrorCorrectionLevel.HIGH


async def test_optimized_respects_explicit_level(artifact_processor, render_fn):
    request = GenerationRequest(
        content=CONTENT,
        config=RendererConfigUpdate(error_correction_level=ErrorCorrectionLevel.LOW),
    )
    await artifact_processor.generate_optimized("c1", request)
    _, config = render_fn.await_args.args
    assert config.error_correction_level == ErrorCorrectionLevel.LOW
