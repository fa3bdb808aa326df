"""Identifier Processor — rate-limited normalization and suspicion analysis.

Invariants:
    - One rate-limit slot per call (a batch counts once)
    - Batch size is checked before admission (oversized batches cost nothing)
    - Normalization itself stays in core/normalize_input.py; this layer only
      adds admission control and logging
"""

import logging

from linkcard.core.domain_types import Err, Ok, Result
from linkcard.core.errors import ErrorDetail
from linkcard.core.normalize_input import (
    NormalizationResult, batch_normalize, normalize_with_analysis,
)
from linkcard.core.suspicion import (
    DEFAULT_POLICY, SuspicionPolicy, SuspicionProfile, analyze,
    security_recommendations,
)
from linkcard.services.rate_limiter import (
    FixedWindowRateLimiter, batch_size_detail, rate_limit_detail,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 50


class IdentifierProcessor:

    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        policy: SuspicionPolicy = DEFAULT_POLICY,
    ):
        self.limiter = limiter
        self.max_batch_size = max_batch_size
        self.policy = policy

    def _admit(self, client_id: str) -> ErrorDetail | None:
        decision = self.limiter.check(client_id)
        return None if decision.allowed else rate_limit_detail(decision)

    def process_url(
        self, client_id: str, raw: str,
    ) -> Result[NormalizationResult, ErrorDetail]:
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)

        outcome = normalize_with_analysis(raw, self.policy)
        if isinstance(outcome, Ok) and outcome.value.suspicion.is_suspicious:
            logger.info(
                f"Suspicious profile URL: {outcome.value.normalized_url}",
                extra={
                    "client_id": client_id,
                    "risk_level": outcome.value.suspicion.risk_level.value,
                },
            )
        return outcome

    def process_batch(self, client_id: str, inputs: list[str]) -> Result[dict, ErrorDetail]:
        if len(inputs) > self.max_batch_size:
            return Err(batch_size_detail(self.max_batch_size))
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)
        return Ok(batch_normalize(inputs, self.policy))

    def analyze_url(
        self, client_id: str, url: str,
    ) -> Result[tuple[SuspicionProfile, list[str]], ErrorDetail]:
        """Risk profile plus user-facing recommendations, without normalizing."""
        rejected = self._admit(client_id)
        if rejected:
            return Err(rejected)
        profile = analyze(url, self.policy)
        return Ok((profile, security_recommendations(profile)))
