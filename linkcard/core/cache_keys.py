"""Cache Keys — deterministic content address for a rendered artifact.

Invariants:
    - Same (content, render-relevant config) → same key, across processes
    - Only size, error_correction_level, margin and colors feed the key
    - Key format: "qr_" + first 32 hex chars of sha256

Design Decisions:
    - sha256 over canonical JSON (sorted keys, compact separators): stable across
      dict ordering and Python versions, unlike hash()
    - Content and config joined with "|" after JSON-encoding the content, so no
      content string can collide with a different (content, config) split
"""

import hashlib
import json

from linkcard.core.domain_types import CacheKey
from linkcard.schemas.renderer import RendererConfig

KEY_PREFIX = "qr_"


def render_fingerprint(config: RendererConfig) -> dict:
    """The subset of config that changes the rendered pixels."""
    return {
        "size": config.size,
        "errorCorrectionLevel": config.error_correction_level.value,
        "margin": config.margin,
        "colors": {
            "dark": config.colors.dark.upper(),
            "light": config.colors.light.upper(),
        },
    }


def compute_cache_key(content: str, config: RendererConfig) -> CacheKey:
    payload = "|".join((
        json.dumps(content, ensure_ascii=False),
        json.dumps(render_fingerprint(config), sort_keys=True, separators=(",", ":")),
    ))
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return CacheKey(KEY_PREFIX + digest[:32])
