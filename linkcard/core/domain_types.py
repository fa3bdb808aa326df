"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CanonicalUrl is always https://linkedin.com/in/<username> (built only by normalize_input)
    - CacheKey is always "qr_" + 32 lowercase hex chars (built only by cache_keys)
    - All valid states encoded as Enums — no raw string matching
    - Ok/Err are the only return shapes of fallible core functions

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (cookie blob is JSON)
    - Ok/Err sum type over exceptions: core never throws across a component boundary
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, NewType, TypeVar


# ─── Identity Types ──────────────────────────────────────────────

CanonicalUrl = NewType("CanonicalUrl", str)
Username = NewType("Username", str)
ClientId = NewType("ClientId", str)
CacheKey = NewType("CacheKey", str)


# ─── Enums ───────────────────────────────────────────────────────

class ErrorCorrectionLevel(str, Enum):
    """QR error correction levels — recovery capacity grows L → H."""
    LOW = "L"
    MEDIUM = "M"
    QUARTILE = "Q"
    HIGH = "H"


class RiskLevel(str, Enum):
    """Aggregate suspicion category derived from the risk score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class ArtifactFormat(str, Enum):
    PNG = "png"
    SVG = "svg"


# ─── Result ──────────────────────────────────────────────────────

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome of a fallible core operation."""
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome — carries a structured error, never an exception."""
    error: E


Result = Ok[T] | Err[E]
