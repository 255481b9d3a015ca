"""
Placement Resolver
==================
Turns a position setting into canvas coordinates.

Technical Notes:
- Corner margins are 5% of the shorter side, clamped to half of each side
- Custom positions are percentages and may fall outside the canvas
- Tile mode has no single anchor; it yields a TileRule describing a field
  one canvas-size larger than the canvas on every side
- Resolution is total: anything unrecognised lands on the origin
"""

import logging
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Tuple, Union

from .config import Position

logger = logging.getLogger(__name__)

MARGIN_RATIO = 0.05


class CanvasGeometry(NamedTuple):
    width: int
    height: int


class Anchor(NamedTuple):
    x: float
    y: float


ORIGIN = Anchor(0.0, 0.0)


@dataclass(frozen=True)
class TileRule:
    """
    Generating rule for a tiled watermark field.

    The field spans ``[x_start, x_end) x [y_start, y_end)`` in pre-rotation
    canvas space and is rotated as a whole about ``pivot``.
    """
    x_start: float
    y_start: float
    x_end: float
    y_end: float
    pivot: Anchor

    def points(self, step_x: float, step_y: float) -> Iterator[Tuple[float, float]]:
        """
        Yield grid points column by column.

        Non-positive steps yield nothing.
        """
        if step_x <= 0 or step_y <= 0:
            return
        x = self.x_start
        while x < self.x_end:
            y = self.y_start
            while y < self.y_end:
                yield x, y
                y += step_y
            x += step_x


def corner_margin(geometry: CanvasGeometry) -> float:
    """5% of the shorter side, never more than half of either dimension."""
    width, height = geometry
    margin = min(width, height) * MARGIN_RATIO
    return max(0.0, min(margin, width / 2, height / 2))


def tile_rule(geometry: CanvasGeometry) -> TileRule:
    width, height = geometry
    return TileRule(
        x_start=-width,
        y_start=-height,
        x_end=width * 2,
        y_end=height * 2,
        pivot=Anchor(width / 2, height / 2),
    )


def resolve(
        geometry: CanvasGeometry,
        position: str,
        custom_x: float = 50,
        custom_y: float = 50
) -> Union[Anchor, TileRule]:
    """
    Resolve a position setting against the canvas.

    Args:
        geometry: Canvas size in pixels.
        position: One of the Position values. Unknown values are accepted.
        custom_x: Horizontal percentage, used by ``custom`` only.
        custom_y: Vertical percentage, used by ``custom`` only.

    Returns:
        An Anchor, or a TileRule for ``tile``.
    """
    width, height = geometry

    try:
        mode = Position(position)
    except ValueError:
        logger.debug("Unknown position %r, using origin", position)
        return ORIGIN

    if mode is Position.TILE:
        return tile_rule(geometry)

    if mode is Position.CUSTOM:
        return Anchor(custom_x / 100 * width, custom_y / 100 * height)

    if mode is Position.CENTER:
        return Anchor(width / 2, height / 2)

    margin = corner_margin(geometry)
    if mode is Position.TOP_LEFT:
        return Anchor(margin, margin)
    if mode is Position.TOP_RIGHT:
        return Anchor(width - margin, margin)
    if mode is Position.BOTTOM_LEFT:
        return Anchor(margin, height - margin)
    return Anchor(width - margin, height - margin)
