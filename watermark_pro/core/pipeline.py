"""
Render Pipeline
===============
One complete render pass: decode the base photo, paint it onto a surface of
the same size, then composite the watermark on top.

Every pass starts from scratch; nothing is reused from an earlier pass.
"""

import logging
from dataclasses import dataclass

from PIL import Image

from .compositor import composite
from .config import WatermarkConfig
from .placement import CanvasGeometry
from .raster import DecodedImage, ImageSource, decode_base_image
from .surface import PillowSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Output of a render pass."""
    image: Image.Image
    geometry: CanvasGeometry
    format: str
    mime_type: str


def render_decoded(base: DecodedImage, config: WatermarkConfig) -> RenderResult:
    """Render ``config`` over an already decoded base image."""
    geometry = CanvasGeometry(*base.size)
    surface = PillowSurface.from_image(base.image)
    composite(surface, geometry, config)
    return RenderResult(
        image=surface.image,
        geometry=geometry,
        format=base.format,
        mime_type=base.mime_type,
    )


def render(source: ImageSource, config: WatermarkConfig) -> RenderResult:
    """
    Watermark the image in ``source``.

    Args:
        source: Encoded image bytes or a path.
        config: Watermark settings.

    Returns:
        RenderResult with an RGBA image at the base image's native size.

    Raises:
        DecodeError: If the base image can't be decoded. Nothing is drawn.
    """
    base = decode_base_image(source)
    result = render_decoded(base, config)
    logger.debug(
        "Rendered %s watermark at %s on %dx%d image",
        config.kind, config.position, result.geometry.width, result.geometry.height,
    )
    return result
