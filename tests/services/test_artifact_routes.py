"""Artifact Routes — cached generation over HTTP.

Invariants:
    - Second identical request is served from cache (render called once)
    - Render failure → 502 generation_failed, nothing cached
    - GET form accepts config as JSON; malformed JSON → 400 invalid_config
"""

import json

from linkcard.core.domain_types import Err
from linkcard.core.errors import ErrorDetail, GENERATION_FAILED

CONTENT = "https://linkedin.com/in/john-doe"


async def test_generate_then_cache_hit(client, render_fn):
    body = {"content": CONTENT, "config": {"size": 300}}
    first = await client.post("/api/v1/artifacts/generate", json=body)
    second = await client.post("/api/v1/artifacts/generate", json=body)

    assert first.status_code == 200
    assert first.json()["data"]["fromCache"] is False
    assert second.json()["data"]["fromCache"] is True
    assert second.json()["data"]["dimensions"] == {"width": 300, "height": 300}
    assert render_fn.await_count == 1


async def test_generate_optimized_includes_analysis(client):
    res = await client.post(
        "/api/v1/artifacts/generate?optimize=true", json={"content": CONTENT},
    )
    payload = res.json()
    assert payload["analysis"]["recommendedErrorCorrectionLevel"] == "H"
    assert payload["data"]["config"]["errorCorrectionLevel"] == "H"


async def test_invalid_content_is_400(client):
    res = await client.post("/api/v1/artifacts/generate", json={"content": "ab"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


async def test_render_failure_is_502(client, render_fn, artifact_cache):
    render_fn.side_effect = None
    render_fn.return_value = Err(ErrorDetail("encoder down", GENERATION_FAILED))

    res = await client.post("/api/v1/artifacts/generate", json={"content": CONTENT})

    assert res.status_code == 502
    assert res.json()["error"]["code"] == "generation_failed"
    assert len(artifact_cache) == 0


async def test_get_generate_with_json_config(client):
    res = await client.get(
        "/api/v1/artifacts/generate",
        params={"content": CONTENT, "config": json.dumps({"margin": 1})},
    )
    assert res.status_code == 200
    assert res.json()["data"]["config"]["margin"] == 1


async def test_get_generate_rejects_malformed_config(client):
    res = await client.get(
        "/api/v1/artifacts/generate", params={"content": CONTENT, "config": "{"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "invalid_config"


async def test_get_generate_reports_field_errors(client):
    res = await client.get(
        "/api/v1/artifacts/generate",
        params={"content": CONTENT, "config": json.dumps({"size": 5})},
    )
    assert res.status_code == 400
    assert res.json()["error"]["path"] == ["config", "size"]


async def test_batch_and_oversized_batch(client):
    ok = await client.post(
        "/api/v1/artifacts/batch",
        json={"requests": [{"content": CONTENT}, {"content": "ab"}]},
    )
    assert ok.json()["summary"]["successful"] == 1

    too_big = await client.post(
        "/api/v1/artifacts/batch", json={"requests": [{"content": CONTENT}] * 3},
    )
    assert too_big.status_code == 413


async def test_cache_stats_and_clear(client):
    await client.post("/api/v1/artifacts/generate", json={"content": CONTENT})

    stats = await client.get("/api/v1/artifacts/cache/stats")
    assert stats.json()["data"]["size"] == 1

    cleared = await client.delete("/api/v1/artifacts/cache")
    assert cleared.json()["data"]["cleared"] == 1
