"""Persisted State Schemas — the versioned, size-bounded cookie blob.

Invariants:
    - All timestamps are timezone-aware ISO-8601 (naive timestamps are corrupt)
    - usage_count is non-negative
    - version is a plain string here; the current-version check lives in core/validation.py
    - Serialized with by_alias=True, exclude_none=True (absent sections are omitted)

Design Decisions:
    - identifier_record.url is a plain str: the canonical-shape check runs on read,
      so write can still measure (and refuse) pathological URLs by size
    - Preferences/PreferencesUpdate split mirrors RendererConfig/RendererConfigUpdate
"""

from pydantic import AwareDatetime, Field

from linkcard.core.domain_types import Theme
from linkcard.schemas.renderer import CamelModel, RendererConfig

CURRENT_STATE_VERSION = "1.0"


class IdentifierRecord(CamelModel):
    """The user's canonical profile URL plus usage bookkeeping."""
    url: str = Field(min_length=1)
    validated_at: AwareDatetime
    last_used_at: AwareDatetime
    usage_count: int = Field(0, ge=0)


class Preferences(CamelModel):
    show_instructions: bool = True
    enable_offline_qr: bool = True
    auto_generate_qr: bool = True
    theme: Theme = Theme.AUTO

    def with_update(self, update: "PreferencesUpdate | None") -> "Preferences":
        if update is None:
            return self
        return Preferences.model_validate({
            **self.model_dump(), **update.model_dump(exclude_none=True),
        })


class PreferencesUpdate(CamelModel):
    show_instructions: bool | None = None
    enable_offline_qr: bool | None = None
    auto_generate_qr: bool | None = None
    theme: Theme | None = None


class PersistedState(CamelModel):
    """Root record stored in the client cookie."""
    version: str = CURRENT_STATE_VERSION
    created_at: AwareDatetime
    updated_at: AwareDatetime
    identifier_record: IdentifierRecord | None = None
    renderer_config: RendererConfig | None = None
    preferences: Preferences | None = None
