"""Bounded State Store — read, sanitize, write and merge the versioned cookie blob.

Invariants:
    - All functions are PURE: no IO, time injected via `now`
    - A written blob never exceeds MAX_STATE_BYTES (UTF-8 bytes of the JSON)
    - Sanitization order on overflow: clamp usage_count to 999, then drop
      renderer_config + preferences, then refuse with `too_large` (nothing written)
    - Corrupt, oversized, wrong-version or expired blobs are reset, never repaired
    - Empty blob = first run: not an error, no reset
    - usage_count increments only when the same URL is resubmitted

Design Decisions:
    - read_state folds the cleanup predicate into its result (should_reset),
      so the shell has one branch for "throw this cookie away"
    - Staleness warnings (90 d record, 7 d identifier) are non-fatal; cleanup
      thresholds (90 d record, 30 d identifier) reset
    - merge_state takes already-validated partial models: right-biased
      defaults ⊕ existing ⊕ updates, so it cannot fail halfway
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

from linkcard.core.domain_types import CanonicalUrl, Err, Ok, Result
from linkcard.core.errors import ErrorDetail, TOO_LARGE
from linkcard.core.validation import validate_persisted_state
from linkcard.schemas.renderer import RendererConfig, RendererConfigUpdate
from linkcard.schemas.state import (
    CURRENT_STATE_VERSION, IdentifierRecord, PersistedState,
    Preferences, PreferencesUpdate,
)

MAX_STATE_BYTES = 3900
MAX_USAGE_COUNT = 999

RECORD_WARNING_DAYS = 90
IDENTIFIER_WARNING_DAYS = 7
RECORD_CLEANUP_DAYS = 90
IDENTIFIER_CLEANUP_DAYS = 30

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class StateReadResult:
    state: PersistedState | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    should_reset: bool = False


@dataclass(frozen=True)
class SizeCheck:
    is_valid: bool
    size: int
    max_size: int = MAX_STATE_BYTES


@dataclass(frozen=True)
class WrittenState:
    serialized: str
    state: PersistedState
    was_sanitized: bool


@dataclass(frozen=True)
class StateUpdate:
    """Validated partial update — None means "leave this section alone"."""
    identifier_url: CanonicalUrl | None = None
    renderer_config: RendererConfigUpdate | None = None
    preferences: PreferencesUpdate | None = None


def _utcnow(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def _age_days(then: datetime, now: datetime) -> float:
    return (now - then).total_seconds() / _SECONDS_PER_DAY


# ─── Size ────────────────────────────────────────────────────────

def serialize_state(state: PersistedState) -> str:
    return state.model_dump_json(by_alias=True, exclude_none=True)


def check_size(state: PersistedState) -> SizeCheck:
    size = len(serialize_state(state).encode("utf-8"))
    return SizeCheck(is_valid=size <= MAX_STATE_BYTES, size=size)


def sanitize_state(state: PersistedState) -> tuple[PersistedState, bool]:
    """Shrink an oversized state. Returns (state, was_sanitized)."""
    if check_size(state).is_valid:
        return state, False

    sanitized = state
    was_sanitized = False
    record = state.identifier_record
    if record is not None and record.usage_count > MAX_USAGE_COUNT:
        sanitized = sanitized.model_copy(update={
            "identifier_record": record.model_copy(
                update={"usage_count": MAX_USAGE_COUNT},
            ),
        })
        was_sanitized = True

    if not check_size(sanitized).is_valid:
        # Keep only the identifier and timestamps
        sanitized = sanitized.model_copy(
            update={"renderer_config": None, "preferences": None},
        )
        was_sanitized = True

    return sanitized, was_sanitized


# ─── Read / Write ────────────────────────────────────────────────

def staleness_warnings(state: PersistedState, now: datetime | None = None) -> list[str]:
    now = _utcnow(now)
    warnings = []
    if _age_days(state.updated_at, now) > RECORD_WARNING_DAYS:
        warnings.append("State data is older than 90 days")
    record = state.identifier_record
    if record is not None and _age_days(record.validated_at, now) > IDENTIFIER_WARNING_DAYS:
        warnings.append("LinkedIn URL validation is older than 7 days")
    return warnings


def should_cleanup(state: PersistedState, now: datetime | None = None) -> bool:
    """True when the record is too old, the wrong version, or its identifier is stale."""
    now = _utcnow(now)
    if _age_days(state.updated_at, now) > RECORD_CLEANUP_DAYS:
        return True
    if state.version != CURRENT_STATE_VERSION:
        return True
    record = state.identifier_record
    return (
        record is not None
        and _age_days(record.validated_at, now) > IDENTIFIER_CLEANUP_DAYS
    )


def read_state(blob: str | None, now: datetime | None = None) -> StateReadResult:
    """Parse and validate a blob. Never raises; corruption sets should_reset."""
    if not blob:
        return StateReadResult()

    size = len(blob.encode("utf-8"))
    if size > MAX_STATE_BYTES:
        return StateReadResult(
            errors=[f"State data too large: {size} bytes (max: {MAX_STATE_BYTES})"],
            should_reset=True,
        )
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        return StateReadResult(
            errors=[f"Failed to parse state JSON: {exc.msg}"], should_reset=True,
        )

    validated = validate_persisted_state(data)
    if isinstance(validated, Err):
        return StateReadResult(
            errors=[e.message for e in validated.error], should_reset=True,
        )

    state = validated.value
    warnings = staleness_warnings(state, now)
    if should_cleanup(state, now):
        return StateReadResult(
            errors=["State data is expired and should be reset"],
            warnings=[*warnings, "State data requires cleanup"],
            should_reset=True,
        )
    return StateReadResult(state=state, warnings=warnings)


def write_state(state: PersistedState) -> Result[WrittenState, ErrorDetail]:
    """Sanitize then serialize. Err(too_large) when no sanitization fits."""
    sanitized, was_sanitized = sanitize_state(state)
    size = check_size(sanitized)
    if not size.is_valid:
        return Err(ErrorDetail(
            f"State data too large: {size.size} bytes (max: {size.max_size})",
            TOO_LARGE,
            extra={"size": size.size, "maxSize": size.max_size},
        ))
    return Ok(WrittenState(
        serialized=serialize_state(sanitized),
        state=sanitized,
        was_sanitized=was_sanitized,
    ))


# ─── Merge ───────────────────────────────────────────────────────

def merge_state(
    existing: PersistedState, update: StateUpdate, now: datetime | None = None,
) -> PersistedState:
    """Apply a partial update. Untouched sections are carried over as-is."""
    now = _utcnow(now)
    changes: dict = {"updated_at": now}

    if update.identifier_url is not None:
        previous = existing.identifier_record
        same_url = previous is not None and previous.url == update.identifier_url
        changes["identifier_record"] = IdentifierRecord(
            url=update.identifier_url,
            validated_at=now,
            last_used_at=now,
            usage_count=previous.usage_count + 1 if same_url else 1,
        )

    if update.renderer_config is not None:
        changes["renderer_config"] = (
            existing.renderer_config or RendererConfig()
        ).with_update(update.renderer_config)

    if update.preferences is not None:
        changes["preferences"] = (
            existing.preferences or Preferences()
        ).with_update(update.preferences)

    return existing.model_copy(update=changes)


def create_state(update: StateUpdate, now: datetime | None = None) -> PersistedState:
    """Fresh record for a first-time writer."""
    now = _utcnow(now)
    return merge_state(PersistedState(created_at=now, updated_at=now), update, now)


def record_usage(existing: PersistedState, now: datetime | None = None) -> PersistedState:
    """Bump usage_count and last_used_at without re-validating the identifier.

    A state with no identifier record is returned unchanged.
    """
    record = existing.identifier_record
    if record is None:
        return existing
    now = _utcnow(now)
    return existing.model_copy(update={
        "updated_at": now,
        "identifier_record": record.model_copy(update={
            "usage_count": record.usage_count + 1, "last_used_at": now,
        }),
    })
