"""Renderer Schemas — QR renderer configuration, generation request and generation result.

Invariants:
    - RendererConfig.size: 64-1024 px, default 256
    - RendererConfig.margin: 0-10 modules, default 4
    - Colors are "#" + 6 hex digits (default black on white)
    - GenerationRequest.content: 1-2953 chars (QR byte-mode capacity at level L)
    - GenerationResult.artifact is always a base64 data URL

Design Decisions:
    - RendererConfigUpdate mirrors RendererConfig with every field optional:
      partial updates are validated field-by-field before any merge happens
    - Batch items are loosely typed so one bad item fails alone, not the batch
"""

from urllib.parse import urlsplit

from pydantic import (
    AwareDatetime, BaseModel, ConfigDict, Field, PositiveInt, field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from linkcard.core.domain_types import ArtifactFormat, ErrorCorrectionLevel

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
MAX_CONTENT_LENGTH = 2953


class CamelModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RendererColors(CamelModel):
    dark: str = Field("#000000", pattern=HEX_COLOR_PATTERN)
    light: str = Field("#FFFFFF", pattern=HEX_COLOR_PATTERN)


class RendererConfig(CamelModel):
    """Full renderer configuration — every field has a default."""
    size: int = Field(256, ge=64, le=1024)
    error_correction_level: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM
    margin: int = Field(4, ge=0, le=10)
    colors: RendererColors = Field(default_factory=RendererColors)

    def with_update(self, update: "RendererConfigUpdate | None") -> "RendererConfig":
        """Right-biased merge: fields set on the update win."""
        if update is None:
            return self
        return RendererConfig.model_validate({
            **self.model_dump(), **update.model_dump(exclude_none=True),
        })


class RendererConfigUpdate(CamelModel):
    """Partial renderer configuration — only provided fields are merged."""
    size: int | None = Field(None, ge=64, le=1024)
    error_correction_level: ErrorCorrectionLevel | None = None
    margin: int | None = Field(None, ge=0, le=10)
    colors: RendererColors | None = None


def _is_absolute_url(value: str) -> bool:
    parts = urlsplit(value)
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


class GenerationRequest(CamelModel):
    """Generation request — content plus optional partial config."""
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    config: RendererConfigUpdate | None = None

    @field_validator("content")
    @classmethod
    def content_must_be_meaningful(cls, v: str) -> str:
        if len(v) < 3 and not _is_absolute_url(v):
            raise PydanticCustomError(
                "invalid_content",
                "QR code content must be a valid URL or meaningful text",
            )
        return v


class BatchGenerationRequest(CamelModel):
    """Items stay raw dicts: each one passes the gate on its own."""
    requests: list[dict]


class ArtifactDimensions(CamelModel):
    width: PositiveInt
    height: PositiveInt


class GenerationResult(CamelModel):
    """Rendered artifact plus the exact inputs that produced it."""
    content: str
    config: RendererConfig
    artifact: str = Field(pattern=r"^data:image/(png|svg\+xml);base64,")
    dimensions: ArtifactDimensions
    generated_at: AwareDatetime
    format: ArtifactFormat = ArtifactFormat.PNG
