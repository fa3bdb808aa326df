"""Service test fixtures — fake clock, renderer double, services and FastAPI test client.

Invariants:
    - Every test gets fresh limiter/cache/processor instances (no shared windows)
    - Singleton dependencies overridden via app.dependency_overrides, cleared after
    - render_fn is an AsyncMock returning Ok(GenerationResult): no qrcode call

Design Decisions:
    - FakeClock instead of sleeping: cache TTLs advance explicitly
    - Route tests use small limits (3 requests, batch 2) so limits are cheap to hit
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from linkcard.api.dependencies import (
    get_artifact_cache, get_artifact_processor, get_identifier_processor,
    get_state_manager,
)
from linkcard.core.domain_types import Ok
from linkcard.main import app
from linkcard.services.artifact_cache import ArtifactCache
from linkcard.services.artifact_processor import ArtifactProcessor
from linkcard.services.identifier_processor import IdentifierProcessor
from linkcard.services.rate_limiter import FixedWindowRateLimiter
from linkcard.services.state_manager import StateManager
from tests.services.fakes import FakeClock, make_result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def render_fn():
    return AsyncMock(side_effect=lambda content, config: Ok(make_result(content, config)))


@pytest.fixture
def artifact_cache(clock):
    return ArtifactCache(max_size=10, default_ttl_seconds=3600, clock=clock)


@pytest.fixture
def artifact_processor(artifact_cache, render_fn):
    return ArtifactProcessor(
        artifact_cache, render_fn,
        FixedWindowRateLimiter(3), max_batch_size=2,
    )


@pytest.fixture
def identifier_processor():
    return IdentifierProcessor(FixedWindowRateLimiter(3), max_batch_size=2)


@pytest.fixture
def state_manager():
    return StateManager()


@pytest.fixture
async def client(artifact_cache, artifact_processor, identifier_processor, state_manager):
    """FastAPI test client with service singletons overridden."""
    app.dependency_overrides[get_artifact_cache] = lambda: artifact_cache
    app.dependency_overrides[get_artifact_processor] = lambda: artifact_processor
    app.dependency_overrides[get_identifier_processor] = lambda: identifier_processor
    app.dependency_overrides[get_state_manager] = lambda: state_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
