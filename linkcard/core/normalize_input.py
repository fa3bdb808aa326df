"""Input Normalizer — raw profile reference → canonical https://linkedin.com/in/<username>.

Invariants:
    - All functions are PURE: deterministic, no IO, never raise
    - normalize() is idempotent: a canonical identifier normalizes to itself
    - Output never contains www., http://, a trailing slash, a fragment,
      a sub-path after the username, or any tracking parameter
    - Non-tracking query segments survive byte-for-byte, in their original order

Design Decisions:
    - Bare handle = no "/" and no "." anywhere (prepend the canonical base)
    - Host rewrite is a single case-insensitive prefix regex, applied before parsing
    - Suspicion is analyzed on the minimally processed input, before tracking
      parameters are stripped, so the profile reflects what the user pasted
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote_plus

from linkcard.core.domain_types import CanonicalUrl, Err, Ok, Result, Username
from linkcard.core.errors import ErrorDetail, REQUIRED
from linkcard.core.suspicion import (
    DEFAULT_POLICY, TRACKING_PARAMETERS, SuspicionPolicy, SuspicionProfile, analyze,
)
from linkcard.core.validation import (
    CANONICAL_BASE_URL, CANONICAL_HOST, PROFILE_PATH_PREFIX,
    check_profile_url, check_username, parse_url, profile_username,
)

_LINKEDIN_PREFIX = re.compile(
    r"^(?:https?://)?(?:www\.)?linkedin\.com(?=[/?#]|$)", re.IGNORECASE,
)
_INPUT_PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class NormalizationResult:
    original_input: str
    normalized_url: CanonicalUrl
    username: Username
    was_transformed: bool
    suspicion: SuspicionProfile

    def to_dict(self) -> dict:
        return {
            "originalInput": self.original_input,
            "normalizedUrl": self.normalized_url,
            "username": self.username,
            "wasTransformed": self.was_transformed,
            "isSuspicious": self.suspicion.is_suspicious,
            "suspicion": self.suspicion.to_dict(),
        }


# ─── Steps ───────────────────────────────────────────────────────

def clean_input(raw: str) -> str:
    """Trim whitespace and trailing slashes."""
    return raw.strip().rstrip("/").strip()


def is_bare_handle(cleaned: str) -> bool:
    return "/" not in cleaned and "." not in cleaned


def rewrite_host(url: str) -> str:
    """[http[s]://][www.]linkedin.com (any case) → https://linkedin.com."""
    return _LINKEDIN_PREFIX.sub(f"https://{CANONICAL_HOST}", url, count=1)


def _without_tracking(query: str) -> str:
    """Drop tracking segments; kept segments stay byte-for-byte."""
    return "&".join(
        segment for segment in query.split("&")
        if segment
        and unquote_plus(segment.split("=", 1)[0]) not in TRACKING_PARAMETERS
    )


def strip_tracking_parameters(url: str) -> str:
    """Remove listed tracking parameters; unparsable URLs are returned as-is."""
    parsed = parse_url(url)
    if isinstance(parsed, Err):
        return url
    parts = parsed.value
    return parts._replace(query=_without_tracking(parts.query)).geturl()


def extract_username(url: str) -> Username | None:
    """Username of a linkedin.com or www.linkedin.com profile URL, else None."""
    parsed = parse_url(url)
    if isinstance(parsed, Err):
        return None
    parts = parsed.value
    if parts.hostname not in (CANONICAL_HOST, f"www.{CANONICAL_HOST}"):
        return None
    if not parts.path.startswith(PROFILE_PATH_PREFIX):
        return None
    return Username(profile_username(parts.path)) or None


# ─── Pipeline ────────────────────────────────────────────────────

def _resolve(raw: str) -> Result[tuple[Username, str], ErrorDetail]:
    """Username plus surviving (non-tracking) query string."""
    cleaned = clean_input(raw)
    if not cleaned:
        return Err(ErrorDetail("LinkedIn profile is required", REQUIRED, ("input",)))

    if is_bare_handle(cleaned):
        errors = check_username(cleaned, ("input",))
        if errors:
            return Err(ErrorDetail.from_field_errors(errors))
        return Ok((Username(cleaned), ""))

    parsed = parse_url(rewrite_host(cleaned))
    if isinstance(parsed, Err):
        return Err(ErrorDetail.from_field_errors([parsed.error]))
    parts = parsed.value
    errors = check_profile_url(parts)
    if errors:
        return Err(ErrorDetail.from_field_errors(errors))

    return Ok((Username(profile_username(parts.path)), _without_tracking(parts.query)))


def _canonical(username: Username, query: str) -> CanonicalUrl:
    url = CANONICAL_BASE_URL + username
    return CanonicalUrl(f"{url}?{query}" if query else url)


def normalize(raw: str) -> Result[CanonicalUrl, ErrorDetail]:
    """Normalize a bare handle or LinkedIn URL into the canonical identifier."""
    resolved = _resolve(raw)
    if isinstance(resolved, Err):
        return resolved
    return Ok(_canonical(*resolved.value))


def prepare_for_analysis(raw: str) -> str:
    """Minimal processing (trim, host rewrite, handle prefix) — tracking kept."""
    cleaned = clean_input(raw)
    if is_bare_handle(cleaned):
        if cleaned and not check_username(cleaned):
            return CANONICAL_BASE_URL + cleaned
        return raw
    return rewrite_host(cleaned)


def normalize_with_analysis(
    raw: str, policy: SuspicionPolicy = DEFAULT_POLICY,
) -> Result[NormalizationResult, ErrorDetail]:
    """Normalize and attach the suspicion profile of the original input."""
    resolved = _resolve(raw)
    if isinstance(resolved, Err):
        return resolved
    username, query = resolved.value
    url = _canonical(username, query)
    return Ok(NormalizationResult(
        original_input=raw,
        normalized_url=url,
        username=username,
        was_transformed=raw != url,
        suspicion=analyze(prepare_for_analysis(raw), policy),
    ))


def batch_normalize(
    inputs: list[str], policy: SuspicionPolicy = DEFAULT_POLICY,
) -> dict:
    """Normalize every input independently. Inputs echoed truncated to 100 chars."""
    results = []
    for index, raw in enumerate(inputs):
        item = {"index": index, "input": raw[:_INPUT_PREVIEW_LENGTH]}
        outcome = normalize_with_analysis(raw, policy)
        if isinstance(outcome, Ok):
            item.update(success=True, data=outcome.value.to_dict())
        else:
            item.update(success=False, error=outcome.error.to_dict())
        results.append(item)

    successful = [r for r in results if r["success"]]
    return {
        "results": results,
        "summary": {
            "total": len(inputs),
            "successful": len(successful),
            "failed": len(results) - len(successful),
            "suspicious": sum(1 for r in successful if r["data"]["isSuspicious"]),
        },
    }
