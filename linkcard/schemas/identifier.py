"""Identifier Schemas — request bodies for normalization, analysis and state updates.

Invariants:
    - Raw input capped at 2000 chars before it reaches the normalizer
    - Shape only: emptiness and LinkedIn rules are the normalizer's job, so its
      field errors (required, invalid_host, ...) reach the client unchanged
"""

from pydantic import Field

from linkcard.schemas.renderer import CamelModel

MAX_RAW_INPUT_LENGTH = 2000


class NormalizeRequest(CamelModel):
    input: str = Field(max_length=MAX_RAW_INPUT_LENGTH)


class BatchNormalizeRequest(CamelModel):
    inputs: list[str]


class AnalyzeRequest(CamelModel):
    url: str = Field(max_length=MAX_RAW_INPUT_LENGTH)
