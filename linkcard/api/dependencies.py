"""API Dependencies — process-wide service singletons and caller identity.

Invariants:
    - One limiter per entry point family (identifiers, artifacts), one cache,
      one state manager per process
    - Singletons are built lazily from get_settings() and cached (lru_cache)
    - Tests replace them through app.dependency_overrides, never by mutation

Design Decisions:
    - lru_cache factories mirror get_settings(): no module-level globals to reset
    - Client identity = first X-Forwarded-For hop, else the socket peer
"""

from functools import lru_cache

from fastapi import Request

from linkcard.config import get_settings
from linkcard.core.cookie_header import CookieOptions
from linkcard.core.domain_types import ClientId
from linkcard.infrastructure.qr_renderer import QrRenderer
from linkcard.services.artifact_cache import ArtifactCache
from linkcard.services.artifact_processor import ArtifactProcessor
from linkcard.services.identifier_processor import IdentifierProcessor
from linkcard.services.rate_limiter import FixedWindowRateLimiter
from linkcard.services.state_manager import StateManager

UNKNOWN_CLIENT = ClientId("unknown")


def client_id_from(request: Request) -> ClientId:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return ClientId(first_hop)
    if request.client and request.client.host:
        return ClientId(request.client.host)
    return UNKNOWN_CLIENT


@lru_cache
def get_artifact_cache() -> ArtifactCache:
    settings = get_settings()
    return ArtifactCache(
        max_size=settings.cache_max_size,
        default_ttl_seconds=settings.cache_ttl_seconds,
    )


@lru_cache
def get_identifier_processor() -> IdentifierProcessor:
    settings = get_settings()
    return IdentifierProcessor(
        FixedWindowRateLimiter(
            settings.identifier_rate_limit, settings.rate_limit_window_seconds,
        ),
        max_batch_size=settings.identifier_batch_max,
    )


@lru_cache
def get_artifact_processor() -> ArtifactProcessor:
    settings = get_settings()
    return ArtifactProcessor(
        get_artifact_cache(),
        QrRenderer(),
        FixedWindowRateLimiter(
            settings.artifact_rate_limit, settings.rate_limit_window_seconds,
        ),
        max_batch_size=settings.artifact_batch_max,
    )


@lru_cache
def get_state_manager() -> StateManager:
    settings = get_settings()
    return StateManager(
        cookie_name=settings.cookie_name,
        options=CookieOptions(
            max_age=settings.cookie_max_age_seconds,
            secure=settings.cookie_secure,
            same_site=settings.cookie_same_site,
        ),
    )
