"""Artifact Cache — in-memory, content-addressed store of rendered QR artifacts.

Invariants:
    - Keyed by compute_cache_key(content, config) (core/cache_keys.py)
    - Expired entries are never returned; they are purged lazily on access
    - At capacity: purge expired first, then evict the least-recently-accessed
      20% (at least one entry)
    - Only successful renders are stored; an Err from render_fn passes through untouched
    - Thread-safe: one lock guards the entry map

Design Decisions:
    - No single-flight: two concurrent misses may both render, last write wins.
      Entries are written only after a successful await, so a cancelled
      request leaves the cache unchanged
    - Per-process only (ADR: no shared backend assumed; multi-instance
      deployments simply warm one cache each)
"""

import logging
import math
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from linkcard.core.cache_keys import compute_cache_key
from linkcard.core.domain_types import CacheKey, Err, Ok, Result
from linkcard.core.errors import ErrorDetail
from linkcard.schemas.renderer import GenerationResult, RendererConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL_SECONDS = 3600
EVICTION_FRACTION = 0.2

RenderFn = Callable[
    [str, RendererConfig], Awaitable[Result[GenerationResult, ErrorDetail]],
]


@dataclass
class CacheEntry:
    key: CacheKey
    artifact: GenerationResult
    created_at: float
    expires_at: float
    access_count: int = 0
    last_accessed_at: float = 0.0


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "maxSize": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hitRate": round(self.hit_rate, 4),
        }


@dataclass(frozen=True)
class CachedResult:
    result: GenerationResult
    cache_key: CacheKey
    from_cache: bool


class ArtifactCache:
    """Bounded TTL cache with least-recently-accessed eviction."""

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.max_size = max_size
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    # ─── Accessors ───────────────────────────────────────────────

    def get(self, key: CacheKey) -> GenerationResult | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if now >= entry.expires_at:
                del self._entries[key]
                self._misses += 1
                return None
            entry.access_count += 1
            entry.last_accessed_at = now
            self._hits += 1
            return entry.artifact

    def has(self, key: CacheKey) -> bool:
        """Presence check that does not count as an access."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and now < entry.expires_at

    def put(
        self, key: CacheKey, artifact: GenerationResult,
        ttl_seconds: int | None = None,
    ) -> None:
        now = self._clock()
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._purge_expired(now)
                if len(self._entries) >= self.max_size:
                    self._evict_least_recent()
            self._entries[key] = CacheEntry(
                key=key,
                artifact=artifact,
                created_at=now,
                expires_at=now + ttl,
                last_accessed_at=now,
            )

    def delete(self, key: CacheKey) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and reset counters. Returns how many were dropped."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._hits = self._misses = self._evictions = 0
        logger.info(f"Artifact cache cleared ({count} entries)")
        return count

    def cleanup(self) -> int:
        """Purge expired entries. Returns how many were removed."""
        with self._lock:
            return self._purge_expired(self._clock())

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_size=self.max_size,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )

    # ─── Generation ──────────────────────────────────────────────

    async def get_or_generate(
        self, content: str, config: RendererConfig, render_fn: RenderFn,
    ) -> Result[CachedResult, ErrorDetail]:
        """Serve a hit, or render and store a successful result."""
        key = compute_cache_key(content, config)
        cached = self.get(key)
        if cached is not None:
            logger.debug("Artifact cache hit", extra={"cache_key": key})
            return Ok(CachedResult(cached, key, from_cache=True))

        rendered = await render_fn(content, config)
        if isinstance(rendered, Err):
            logger.warning(
                f"Render failed, not cached: {rendered.error.message}",
                extra={"cache_key": key, "error_code": rendered.error.code},
            )
            return rendered

        self.put(key, rendered.value)
        return Ok(CachedResult(rendered.value, key, from_cache=False))

    # ─── Internals (caller holds the lock) ───────────────────────

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _evict_least_recent(self) -> None:
        count = max(1, math.floor(self.max_size * EVICTION_FRACTION))
        victims = sorted(
            self._entries.values(), key=lambda e: e.last_accessed_at,
        )[:count]
        for entry in victims:
            del self._entries[entry.key]
        self._evictions += len(victims)
        logger.info(f"Evicted {len(victims)} artifact cache entries")
