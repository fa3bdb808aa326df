"""QR Renderer — real qrcode/Pillow encoding behind the async wrapper.

Tests cover:
    - Output is a PNG data URL of exactly the requested size
    - Configured colors reach the image
    - Content beyond QR capacity maps to generation_failed (no exception)
    - A size smaller than the fitted matrix plus margin is refused, not squeezed
"""

import base64
import io

from PIL import Image

from linkcard.core.domain_types import Err, ErrorCorrectionLevel, Ok
from linkcard.infrastructure.qr_renderer import PNG_DATA_URL_PREFIX, QrRenderer
from linkcard.schemas.renderer import RendererColors, RendererConfig


def _decode(artifact: str) -> Image.Image:
    assert artifact.startswith(PNG_DATA_URL_PREFIX)
    png = base64.b64decode(artifact[len(PNG_DATA_URL_PREFIX):])
    return Image.open(io.BytesIO(png))


async def test_renders_png_of_requested_size():
    config = RendererConfig(size=200)
    result = await QrRenderer().render("https://linkedin.com/in/john-doe", config)

    assert isinstance(result, Ok)
    image = _decode(result.value.artifact)
    assert image.format == "PNG"
    assert image.size == (200, 200)
    assert result.value.dimensions.width == 200
    assert result.value.config == config


async def test_margin_uses_light_color():
    config = RendererConfig(
        size=128, margin=4, colors=RendererColors(dark="#0A66C2", light="#FFFF00"),
    )
    result = await QrRenderer()("https://linkedin.com/in/john-doe", config)

    image = _decode(result.value.artifact).convert("RGB")
    assert image.getpixel((0, 0)) == (255, 255, 0)


async def test_content_over_capacity_is_generation_failed():
    config = RendererConfig(error_correction_level=ErrorCorrectionLevel.HIGH)
    result = await QrRenderer().render("x" * 2953, config)

    assert isinstance(result, Err)
    assert result.error.code == "generation_failed"


async def test_size_smaller_than_matrix_is_generation_failed():
    content = "https://linkedin.com/in/john-doe?" + "a" * 300
    config = RendererConfig(size=64, margin=4)
    result = await QrRenderer().render(content, config)

    assert isinstance(result, Err)
    assert result.error.code == "generation_failed"
    assert result.error.path == ("config", "size")
    assert "too small" in result.error.message


async def test_dense_content_keeps_every_module_when_size_fits():
    content = "https://linkedin.com/in/john-doe?" + "a" * 300
    result = await QrRenderer().render(content, RendererConfig(size=256, margin=4))

    assert isinstance(result, Ok)
    assert _decode(result.value.artifact).size == (256, 256)
