"""Suspicion Analyzer — heuristic risk indicators and score for a profile URL.

Invariants:
    - analyze() is PURE and never raises: unparsable input yields only has_unusual_format
    - Indicators are independent booleans; score is their weighted sum
    - Risk level is low (< medium_threshold), medium, or high (>= high_threshold)
    - Profiles are recomputed on demand, never persisted

Design Decisions:
    - Weights and thresholds in an overridable SuspicionPolicy table: they are
      heuristic policy, not a documented standard, so callers may tune them
    - Parameter-name patterns are case-insensitive substrings ("utm_campaign" matches "campaign")
"""

import re
from dataclasses import dataclass
from urllib.parse import parse_qsl

from linkcard.core.domain_types import Err, RiskLevel
from linkcard.core.validation import parse_url, profile_username

# Query parameters that only carry attribution data (case-sensitive names).
TRACKING_PARAMETERS: tuple[str, ...] = (
    "utm_source", "utm_medium", "utm_campaign", "utm_content", "utm_term",
    "ref", "refId", "trackingId", "source", "src", "fbclid", "gclid",
)

_ALL_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SuspicionPolicy:
    """Weights, thresholds and pattern table used to score a URL."""
    tracking_weight: int = 20
    unusual_parameters_weight: int = 30
    short_username_weight: int = 25
    unusual_format_weight: int = 35
    medium_threshold: int = 25
    high_threshold: int = 50
    max_query_params: int = 2
    short_username_length: int = 3
    suspicious_param_patterns: tuple[str, ...] = ("track", "ref", "source", "campaign")

    def level_for(self, score: int) -> RiskLevel:
        if score >= self.high_threshold:
            return RiskLevel.HIGH
        if score >= self.medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


DEFAULT_POLICY = SuspicionPolicy()


@dataclass(frozen=True)
class SuspicionProfile:
    has_tracking_params: bool
    has_unusual_parameters: bool
    has_short_username: bool
    has_unusual_format: bool
    risk_score: int
    risk_level: RiskLevel

    @property
    def is_suspicious(self) -> bool:
        return (
            self.has_tracking_params
            or self.has_unusual_parameters
            or self.has_short_username
            or self.has_unusual_format
        )

    def to_dict(self) -> dict:
        return {
            "hasTrackingParams": self.has_tracking_params,
            "hasUnusualParameters": self.has_unusual_parameters,
            "hasShortUsername": self.has_short_username,
            "hasUnusualFormat": self.has_unusual_format,
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level.value,
            "isSuspicious": self.is_suspicious,
        }


def _build_profile(
    tracking: bool, unusual_params: bool, short: bool, unusual_format: bool,
    policy: SuspicionPolicy,
) -> SuspicionProfile:
    score = (
        tracking * policy.tracking_weight
        + unusual_params * policy.unusual_parameters_weight
        + short * policy.short_username_weight
        + unusual_format * policy.unusual_format_weight
    )
    return SuspicionProfile(
        has_tracking_params=tracking,
        has_unusual_parameters=unusual_params,
        has_short_username=short,
        has_unusual_format=unusual_format,
        risk_score=score,
        risk_level=policy.level_for(score),
    )


def _query_names(query: str) -> list[str]:
    """Decoded parameter names in order, duplicates kept (each counts toward the limit)."""
    return [name for name, _ in parse_qsl(query, keep_blank_values=True)]


def analyze(url: str, policy: SuspicionPolicy = DEFAULT_POLICY) -> SuspicionProfile:
    """Compute the suspicion profile of a canonical identifier or raw URL."""
    parsed = parse_url(url.strip()) if url else None
    if parsed is None or isinstance(parsed, Err):
        return _build_profile(False, False, False, True, policy)

    parts = parsed.value
    names = _query_names(parts.query)
    username = profile_username(parts.path)

    tracking = any(name in TRACKING_PARAMETERS for name in names)
    unusual_params = len(names) > policy.max_query_params or any(
        pattern in name.lower()
        for name in names
        for pattern in policy.suspicious_param_patterns
    )
    short = len(username) <= policy.short_username_length
    unusual_format = (
        len(parts.path.split("/")) > 3
        or bool(parts.fragment)
        or parts.port is not None
        or parts.scheme not in ("http", "https")
        or bool(_ALL_DIGITS.fullmatch(username))
        or "--" in username
        or "__" in username
    )
    return _build_profile(tracking, unusual_params, short, unusual_format, policy)


def security_recommendations(profile: SuspicionProfile) -> list[str]:
    """One user-facing hint per raised indicator."""
    recommendations = []
    if profile.has_tracking_params:
        recommendations.append("Remove tracking parameters for privacy")
    if profile.has_unusual_parameters:
        recommendations.append("Review unusual query parameters")
    if profile.has_short_username:
        recommendations.append(
            "Verify username - very short usernames may be suspicious",
        )
    if profile.has_unusual_format:
        recommendations.append("Verify URL format - unusual patterns detected")
    if not recommendations:
        recommendations.append("URL appears to be clean and safe")
    return recommendations
