"""Validation Gate — shared structural checks for identifiers, renderer config and state.

Invariants:
    - All functions are PURE: no IO, no side effects, never raise
    - Failures are field-addressable FieldError lists (message, code, path)
    - Validation returns a new model or errors — inputs are never partially mutated
    - parse_url is the only place a URL string is split; it returns Ok/Err

Design Decisions:
    - Pydantic schemas own shape/bounds; this module owns cross-field rules and
      maps pydantic.ValidationError into FieldError lists (same shape for every caller)
    - check_* return lists (empty = valid); validate_* return Ok(model) | Err(errors)
"""

import re
from urllib.parse import SplitResult, urlsplit

from pydantic import BaseModel, ValidationError

from linkcard.core.domain_types import Err, Ok, Result
from linkcard.core.errors import (
    FieldError,
    INVALID_CHARACTERS, INVALID_HOST, INVALID_PATH, INVALID_SCHEME,
    INVALID_STATE, INVALID_URL, TOO_LONG, TOO_SHORT, VERSION_MISMATCH,
)
from linkcard.schemas.renderer import GenerationRequest, RendererConfig
from linkcard.schemas.state import CURRENT_STATE_VERSION, PersistedState

USERNAME_CHARSET = re.compile(r"[A-Za-z0-9_-]+")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 100

CANONICAL_SCHEME = "https"
CANONICAL_HOST = "linkedin.com"
PROFILE_PATH_PREFIX = "/in/"
CANONICAL_BASE_URL = f"{CANONICAL_SCHEME}://{CANONICAL_HOST}{PROFILE_PATH_PREFIX}"


# ─── Identifier checks ───────────────────────────────────────────

def check_username(username: str, path: tuple = ("username",)) -> list[FieldError]:
    """Username must be 3-100 chars of letters, digits, hyphens, underscores."""
    errors = []
    if len(username) < USERNAME_MIN_LENGTH:
        errors.append(FieldError(
            "Username must be at least 3 characters", TOO_SHORT, path,
        ))
    if len(username) > USERNAME_MAX_LENGTH:
        errors.append(FieldError(
            "Username must be at most 100 characters", TOO_LONG, path,
        ))
    if username and not USERNAME_CHARSET.fullmatch(username):
        errors.append(FieldError(
            "Username can only contain letters, numbers, hyphens, and underscores",
            INVALID_CHARACTERS, path,
        ))
    return errors


def parse_url(url: str) -> Result[SplitResult, FieldError]:
    """Split an absolute URL. Err when it has no scheme/host or a bad port."""
    invalid = FieldError("Must be a valid LinkedIn profile URL", INVALID_URL, ("url",))
    if "://" not in url:
        return Err(invalid)
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError:
        return Err(invalid)
    if not parts.scheme or not parts.netloc:
        return Err(invalid)
    return Ok(parts)


def profile_username(path: str) -> str:
    """First path segment after /in/ ("" when absent)."""
    return path.replace(PROFILE_PATH_PREFIX, "", 1).split("/")[0]


def check_profile_url(parts: SplitResult) -> list[FieldError]:
    """Scheme, host, profile path and username — first failing rule wins."""
    if parts.scheme != CANONICAL_SCHEME:
        return [FieldError("Must use HTTPS protocol", INVALID_SCHEME, ("url",))]
    if parts.netloc != CANONICAL_HOST:
        return [FieldError(
            "Must be a LinkedIn URL (linkedin.com)", INVALID_HOST, ("url",),
        )]
    if not parts.path.startswith(PROFILE_PATH_PREFIX):
        return [FieldError(
            "Must be a LinkedIn profile URL (/in/username)", INVALID_PATH, ("url",),
        )]
    return check_username(profile_username(parts.path), ("url",))


def check_canonical_url(url: str) -> list[FieldError]:
    """URL must be https://linkedin.com/in/<username>[?query] — no sub-path, no fragment."""
    parsed = parse_url(url)
    if isinstance(parsed, Err):
        return [parsed.error]
    parts = parsed.value
    errors = check_profile_url(parts)
    if errors:
        return errors
    if parts.path != PROFILE_PATH_PREFIX + profile_username(parts.path) or parts.fragment:
        return [FieldError(
            "Must be a canonical LinkedIn profile URL", INVALID_URL, ("url",),
        )]
    return []


# ─── Schema checks ───────────────────────────────────────────────

def field_errors_from(exc: ValidationError, prefix: tuple = ()) -> list[FieldError]:
    """Map pydantic errors to FieldError (loc → path, type → code)."""
    return [
        FieldError(message=e["msg"], code=e["type"], path=prefix + tuple(e["loc"]))
        for e in exc.errors()
    ]


def _validate_model(model: type[BaseModel], data: object, prefix: tuple = ()):
    try:
        return Ok(model.model_validate(data))
    except ValidationError as exc:
        return Err(field_errors_from(exc, prefix))


def validate_renderer_config(data: object) -> Result[RendererConfig, list[FieldError]]:
    return _validate_model(RendererConfig, data if data is not None else {}, ("config",))


def validate_generation_request(
    data: object,
) -> Result[GenerationRequest, list[FieldError]]:
    return _validate_model(GenerationRequest, data)


def check_content(content: str) -> list[FieldError]:
    """Content rules of a generation request, without the config part."""
    result = validate_generation_request({"content": content})
    return result.error if isinstance(result, Err) else []


def validate_persisted_state(data: object) -> Result[PersistedState, list[FieldError]]:
    """Schema + current version + canonical identifier URL."""
    if not isinstance(data, dict):
        return Err([FieldError("State must be a JSON object", INVALID_STATE)])
    result = _validate_model(PersistedState, data)
    if isinstance(result, Err):
        return result

    state: PersistedState = result.value
    if state.version != CURRENT_STATE_VERSION:
        return Err([FieldError(
            f"State version {state.version} is not supported",
            VERSION_MISMATCH, ("version",),
        )])
    if state.identifier_record is not None:
        url_errors = check_canonical_url(state.identifier_record.url)
        if url_errors:
            return Err([
                FieldError(e.message, e.code, ("identifierRecord", "url"))
                for e in url_errors
            ])
    return Ok(state)
