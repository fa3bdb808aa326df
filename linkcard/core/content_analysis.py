"""Content Analysis — QR density estimate and error-correction recommendation for content.

Invariants:
    - PURE: no IO, never raises
    - Invalid content (per check_content) yields is_valid=False and no estimate
    - estimated_modules is the side length of the smallest QR version expected
      to fit the content (21 for version 1, +4 per version, capped at version 10)

Design Decisions:
    - Length thresholds are byte-mode capacities at level M, rounded — an estimate
      for UX hints, not an encoder (the renderer picks the real version)
    - Short linkedin.com/in/ URLs get level H: they are sparse enough to afford it
"""

from dataclasses import dataclass, field

from linkcard.core.domain_types import ErrorCorrectionLevel
from linkcard.core.validation import check_content

# (min content length, module side length) for QR versions 2-10
_VERSION_STEPS: tuple[tuple[int, int], ...] = (
    (25, 25), (47, 29), (77, 33), (114, 37), (154, 41),
    (195, 45), (224, 49), (279, 53), (335, 57),
)
_VERSION_1_MODULES = 21


@dataclass(frozen=True)
class ContentAnalysis:
    is_valid: bool
    estimated_modules: int | None = None
    recommended_level: ErrorCorrectionLevel | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "estimatedModules": self.estimated_modules,
            "recommendedErrorCorrectionLevel": (
                self.recommended_level.value if self.recommended_level else None
            ),
            "warnings": self.warnings,
            "errors": self.errors,
        }


def estimate_modules(length: int) -> int:
    modules = _VERSION_1_MODULES
    for threshold, side in _VERSION_STEPS:
        if length > threshold:
            modules = side
    return modules


def analyze_content(content: str) -> ContentAnalysis:
    """Estimate density and recommend an error-correction level."""
    errors = check_content(content)
    if errors:
        return ContentAnalysis(is_valid=False, errors=[e.message for e in errors])

    length = len(content)
    warnings = []
    level = ErrorCorrectionLevel.MEDIUM

    if "utm_" in content or "tracking" in content:
        warnings.append(
            "URL contains tracking parameters that increase QR code complexity",
        )
    if length > 200:
        warnings.append(
            "Long URLs may result in dense QR codes that are harder to scan",
        )
        level = ErrorCorrectionLevel.LOW
    if length > 500:
        warnings.append("Very long content may not be suitable for QR codes")

    if "linkedin.com/in/" in content:
        if length < 50:
            level = ErrorCorrectionLevel.HIGH
        elif length < 100:
            level = ErrorCorrectionLevel.QUARTILE

    return ContentAnalysis(
        is_valid=True,
        estimated_modules=estimate_modules(length),
        recommended_level=level,
        warnings=warnings,
    )
