"""Fixed-Window Rate Limiter — per-client request budget over a fixed window.

Invariants:
    - At most max_requests admitted per client per window
    - A window starts at the client's first request and resets wholesale
      once window_seconds have elapsed (no sliding)
    - Rejections leave the window untouched and carry a fixed
      retry_after equal to the window length

Design Decisions:
    - Counting delegated to the `limits` fixed-window strategy over its
      in-memory storage (per-key locks, expired windows dropped by the storage)
    - One storage per limiter: identifier and artifact budgets never mix
"""

import logging
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy

from linkcard.core.errors import BATCH_SIZE_EXCEEDED, ErrorDetail, RATE_LIMIT_EXCEEDED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class FixedWindowRateLimiter:
    """Counts requests per client id in fixed windows."""

    def __init__(self, max_requests: int, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = FixedWindowStrategy(self._storage)

    def check(self, client_id: str) -> RateLimitDecision:
        """Admit or reject one request, consuming budget on admission."""
        if not self._strategy.hit(self._item, client_id):
            logger.warning(
                f"Rate limit exceeded for {client_id}",
                extra={"client_id": client_id},
            )
            return RateLimitDecision(False, 0, self.window_seconds)
        return RateLimitDecision(True, self.remaining(client_id))

    def can_proceed(self, client_id: str) -> bool:
        return self.check(client_id).allowed

    def remaining(self, client_id: str) -> int:
        """Budget left in the current window, without consuming any."""
        return self._strategy.get_window_stats(self._item, client_id).remaining

    def reset(self, client_id: str | None = None) -> None:
        """Forget one client's window, or every window."""
        if client_id is None:
            self._storage.reset()
        else:
            self._strategy.clear(self._item, client_id)


# ─── Admission errors ────────────────────────────────────────────

def rate_limit_detail(decision: RateLimitDecision) -> ErrorDetail:
    return ErrorDetail(
        "Rate limit exceeded", RATE_LIMIT_EXCEEDED,
        extra={"retryAfter": decision.retry_after},
    )


def batch_size_detail(max_batch_size: int) -> ErrorDetail:
    """Raised before admission: an oversized batch never consumes a slot."""
    return ErrorDetail(
        f"Batch size exceeds maximum of {max_batch_size}", BATCH_SIZE_EXCEEDED,
        extra={"maxBatchSize": max_batch_size},
    )
