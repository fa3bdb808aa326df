"""QR Renderer — wraps the qrcode/Pillow encoder behind an async, never-raising call.

Invariants:
    - render() returns Ok(GenerationResult) or Err(ErrorDetail generation_failed)
    - Output is always a PNG data URL of exactly config.size x config.size pixels
    - Every module keeps at least one pixel: a matrix (plus margin) wider than
      config.size is refused with generation_failed, never squeezed
    - Encoding runs in a worker thread (asyncio.to_thread): never blocks the loop
    - All encoder failures mapped to generation_failed; nothing is retried here

Design Decisions:
    - Box size derived from the fitted module count, then a NEAREST resize to the
      exact requested size: modules stay crisp, dimensions stay exact
    - Wrapper over raw library calls: isolates the third-party API from the cache
      and processors (ADR: single responsibility)
"""

import asyncio
import base64
import io
import logging
from datetime import datetime, timezone

import qrcode
from PIL import Image
from qrcode.constants import (
    ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q,
)
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from linkcard.core.domain_types import ArtifactFormat, Err, ErrorCorrectionLevel, Ok, Result
from linkcard.core.errors import ErrorDetail, GENERATION_FAILED
from linkcard.schemas.renderer import ArtifactDimensions, GenerationResult, RendererConfig

logger = logging.getLogger(__name__)

_QR_ERROR_CORRECTION = {
    ErrorCorrectionLevel.LOW: ERROR_CORRECT_L,
    ErrorCorrectionLevel.MEDIUM: ERROR_CORRECT_M,
    ErrorCorrectionLevel.QUARTILE: ERROR_CORRECT_Q,
    ErrorCorrectionLevel.HIGH: ERROR_CORRECT_H,
}

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


class SizeTooSmallError(ValueError):
    """Fitted matrix plus margin needs more pixels than config.size."""

    def __init__(self, size: int, required: int):
        super().__init__(
            f"Size {size}px is too small for this content "
            f"(needs at least {required}px)",
        )
        self.required = required


def _encode_png(content: str, config: RendererConfig) -> bytes:
    qr = qrcode.QRCode(
        error_correction=_QR_ERROR_CORRECTION[config.error_correction_level],
        box_size=1,
        border=config.margin,
        image_factory=PilImage,
    )
    qr.add_data(content)
    qr.make(fit=True)
    required = qr.modules_count + 2 * config.margin
    if required > config.size:
        raise SizeTooSmallError(config.size, required)
    qr.box_size = config.size // required

    image = qr.make_image(
        fill_color=config.colors.dark, back_color=config.colors.light,
    ).get_image()
    image = image.convert("RGB").resize(
        (config.size, config.size), Image.Resampling.NEAREST,
    )
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class QrRenderer:
    """Async render function for ArtifactCache.get_or_generate."""

    async def __call__(
        self, content: str, config: RendererConfig,
    ) -> Result[GenerationResult, ErrorDetail]:
        return await self.render(content, config)

    async def render(
        self, content: str, config: RendererConfig,
    ) -> Result[GenerationResult, ErrorDetail]:
        try:
            png = await asyncio.to_thread(_encode_png, content, config)
        except DataOverflowError:
            return Err(ErrorDetail(
                "Content is too long for the selected error correction level",
                GENERATION_FAILED,
            ))
        except SizeTooSmallError as e:
            return Err(ErrorDetail(str(e), GENERATION_FAILED, ("config", "size")))
        except Exception as e:
            logger.error(f"QR encoding failed: {e}", exc_info=True)
            return Err(ErrorDetail(
                f"Failed to generate QR code: {e}", GENERATION_FAILED,
            ))

        return Ok(GenerationResult(
            content=content,
            config=config,
            artifact=PNG_DATA_URL_PREFIX + base64.b64encode(png).decode("ascii"),
            dimensions=ArtifactDimensions(width=config.size, height=config.size),
            generated_at=datetime.now(timezone.utc),
            format=ArtifactFormat.PNG,
        ))
