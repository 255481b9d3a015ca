"""
Compositor
==========
Draws the active watermark payload onto a surface that already holds the
base image.

Technical Notes:
- Drawing state is saved on entry and restored on every exit path, so
  repeated renders of the same config are identical
- Text and images are both centred on their own middle, so rotation pivots
  around the watermark's visual centre
- Tile mode rotates the whole field about the canvas centre, then lays out an
  axis-aligned grid from -1x to +2x of each canvas dimension so no corner is
  left uncovered after rotation
- Text tiles use the font size as their height
"""

import logging
import math
from typing import Callable

from .config import ImagePayload, TextPayload, WatermarkConfig, WatermarkKind
from .errors import DecodeError
from .fonts import FontSpec
from .placement import Anchor, CanvasGeometry, TileRule, resolve
from .surface import Surface

logger = logging.getLogger(__name__)

# Extra spacing added to every tile step, on top of the configured gap
TEXT_TILE_PADDING = 100
IMAGE_TILE_PADDING = 150

# scale=50 draws the watermark at its native pixel size
NATIVE_SCALE = 50


def font_spec(text: TextPayload) -> FontSpec:
    return FontSpec(text.font_family, text.font_size, bool(text.bold), bool(text.italic))


def image_draw_size(native_width: int, native_height: int, scale: float):
    factor = scale / NATIVE_SCALE
    return native_width * factor, native_height * factor


def tile(
        surface: Surface,
        rule: TileRule,
        item_width: float,
        item_height: float,
        gap: float,
        padding: float,
        rotation: float,
        draw_one: Callable[[float, float], None]
) -> int:
    """
    Repeat a drawable over the tile field.

    The surface is rotated once about the field pivot, then ``draw_one`` is
    called for every grid point.

    Args:
        surface: Target surface; its transform is modified.
        rule: Field extent and pivot from the placement resolver.
        item_width: Width of one instance.
        item_height: Height of one instance.
        gap: User-configured gap between instances.
        padding: Fixed spacing added to the gap for this payload kind.
        rotation: Field rotation in degrees.
        draw_one: Draws a single instance centred on the given point.

    Returns:
        Number of instances drawn.
    """
    step_x = item_width + gap + padding
    step_y = item_height + gap + padding
    if step_x <= 0 or step_y <= 0:
        return 0

    pivot_x, pivot_y = rule.pivot
    surface.translate(pivot_x, pivot_y)
    surface.rotate(math.radians(rotation))
    surface.translate(-pivot_x, -pivot_y)

    count = 0
    for x, y in rule.points(step_x, step_y):
        draw_one(x, y)
        count += 1
    return count


def _place(surface: Surface, anchor: Anchor, rotation: float):
    surface.translate(anchor.x, anchor.y)
    surface.rotate(math.radians(rotation))


def _draw_text(surface: Surface, placement, config: WatermarkConfig):
    text = config.text
    content = text.content or ""
    if not content:
        return

    surface.set_font(font_spec(text))
    surface.fill_style = text.color

    if isinstance(placement, TileRule):
        text_width = surface.measure_text(content)
        count = tile(
            surface, placement, text_width, text.font_size, config.tile_gap,
            TEXT_TILE_PADDING, text.rotation,
            lambda x, y: surface.fill_text(content, x, y),
        )
        logger.debug("Tiled text watermark %d times", count)
    else:
        _place(surface, placement, text.rotation)
        surface.fill_text(content, 0, 0)


def _draw_image(surface: Surface, placement, config: WatermarkConfig):
    payload: ImagePayload = config.image
    if payload.source is None:
        return

    try:
        pixels = payload.source.decode()
    except DecodeError as e:
        logger.warning("Watermark image could not be decoded: %s", e)
        return

    draw_width, draw_height = image_draw_size(pixels.width, pixels.height, payload.scale)
    if draw_width <= 0 or draw_height <= 0:
        return
    offset_x = -draw_width / 2
    offset_y = -draw_height / 2

    if isinstance(placement, TileRule):
        count = tile(
            surface, placement, draw_width, draw_height, config.tile_gap,
            IMAGE_TILE_PADDING, payload.rotation,
            lambda x, y: surface.draw_image(pixels, x + offset_x, y + offset_y, draw_width, draw_height),
        )
        logger.debug("Tiled image watermark %d times", count)
    else:
        _place(surface, placement, payload.rotation)
        surface.draw_image(pixels, offset_x, offset_y, draw_width, draw_height)


def composite(surface: Surface, geometry: CanvasGeometry, config: WatermarkConfig):
    """
    Draw the watermark described by ``config`` onto ``surface``.

    The surface must already contain the base image. Nothing is raised for
    out-of-range or unknown settings; they resolve to a fallback or draw
    nothing.

    Args:
        surface: Drawing surface sized to ``geometry``.
        geometry: Canvas size in pixels.
        config: Settings snapshot; never modified.
    """
    placement = resolve(geometry, config.position, config.custom_x, config.custom_y)

    surface.save()
    try:
        if config.kind == WatermarkKind.TEXT.value:
            surface.global_alpha = config.text.opacity
            _draw_text(surface, placement, config)
        elif config.kind == WatermarkKind.IMAGE.value:
            surface.global_alpha = config.image.opacity
            _draw_image(surface, placement, config)
        else:
            logger.debug("Unknown watermark kind %r, nothing drawn", config.kind)
    finally:
        surface.restore()
