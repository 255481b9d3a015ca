"""
Drawing Surface
===============
A small 2D-canvas style drawing API on top of a Pillow RGBA image.

Technical Notes:
- The current transform is an affine matrix ``(a, b, c, d, e, f)`` mapping
  local coordinates to canvas pixels: ``x' = a*x + c*y + e``,
  ``y' = b*x + d*y + f``. ``rotate()`` turns clockwise on screen (y points
  down), like an HTML canvas
- Draw calls made under the same transform and alpha are collected into a
  batch. The batch is rendered into one untransformed layer, culled to the
  part that can reach the canvas, warped once with ``Image.transform`` and
  blended with ``alpha_composite``
- Changing the transform or alpha, restoring state, or reading ``image``
  flushes the pending batch
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .fonts import FontSpec, get_font

logger = logging.getLogger(__name__)

Matrix = Tuple[float, float, float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def multiply(m: Matrix, n: Matrix) -> Matrix:
    """Compose two transforms; ``n`` is applied first."""
    ma, mb, mc, md, me, mf = m
    na, nb, nc, nd, ne, nf = n
    return (
        ma * na + mc * nb,
        mb * na + md * nb,
        ma * nc + mc * nd,
        mb * nc + md * nd,
        ma * ne + mc * nf + me,
        mb * ne + md * nf + mf,
    )


def invert(m: Matrix) -> Matrix:
    a, b, c, d, e, f = m
    det = a * d - b * c
    if det == 0:
        raise ValueError("Transform is not invertible")
    return (
        d / det,
        -b / det,
        -c / det,
        a / det,
        (c * f - d * e) / det,
        (b * e - a * f) / det,
    )


def apply(m: Matrix, x: float, y: float) -> Tuple[float, float]:
    a, b, c, d, e, f = m
    return a * x + c * y + e, b * x + d * y + f


def _is_integer_translation(m: Matrix) -> bool:
    a, b, c, d, e, f = m
    return (a, b, c, d) == (1.0, 0.0, 0.0, 1.0) and float(e).is_integer() and float(f).is_integer()


def clamp_alpha(alpha: float) -> float:
    if alpha != alpha:  # NaN
        return 0.0
    return max(0.0, min(1.0, alpha))


class Surface(Protocol):
    """The drawing operations the compositor relies on."""

    width: int
    height: int
    global_alpha: float
    fill_style: str

    def save(self) -> None: ...

    def restore(self) -> None: ...

    def translate(self, x: float, y: float) -> None: ...

    def rotate(self, radians: float) -> None: ...

    def set_font(self, spec: FontSpec) -> None: ...

    def measure_text(self, text: str) -> float: ...

    def fill_text(self, text: str, x: float, y: float) -> None: ...

    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None: ...


# =============================================================================
# BATCHED DRAW ITEMS
# =============================================================================

@dataclass(frozen=True)
class _TextItem:
    text: str
    x: float
    y: float
    font: ImageFont.FreeTypeFont
    fill: Tuple[int, int, int, int]

    def bounds(self) -> Tuple[float, float, float, float]:
        left, top, right, bottom = self.font.getbbox(self.text, anchor="mm")
        return self.x + left, self.y + top, self.x + right, self.y + bottom

    def render(self, draw: ImageDraw.ImageDraw, layer: Image.Image, ox: int, oy: int):
        draw.text((self.x - ox, self.y - oy), self.text, font=self.font, fill=self.fill, anchor="mm")


@dataclass(frozen=True)
class _ImageItem:
    image: Image.Image
    x: int
    y: int

    def bounds(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.image.width, self.y + self.image.height

    def render(self, draw: ImageDraw.ImageDraw, layer: Image.Image, ox: int, oy: int):
        composite_at(layer, self.image, self.x - ox, self.y - oy)


def _intersects(a: Tuple[float, float, float, float], b: Tuple[float, float, float, float]) -> bool:
    return a[0] < b[2] and b[0] < a[2] and a[1] < b[3] and b[1] < a[3]


def composite_at(target: Image.Image, layer: Image.Image, x: int, y: int):
    """Alpha-composite ``layer`` onto ``target`` at (x, y), clipping as needed."""
    left = max(0, x)
    top = max(0, y)
    right = min(target.width, x + layer.width)
    bottom = min(target.height, y + layer.height)
    if left >= right or top >= bottom:
        return
    target.alpha_composite(layer, dest=(left, top), source=(left - x, top - y, right - x, bottom - y))


# =============================================================================
# PILLOW SURFACE
# =============================================================================

class PillowSurface:
    """
    Canvas-like drawing surface backed by an RGBA Pillow image.

    Usage:
        surface = PillowSurface(800, 600)
        surface.draw_image(photo, 0, 0, 800, 600)
        surface.save()
        surface.translate(400, 300)
        surface.rotate(math.radians(30))
        surface.fill_text("Hello", 0, 0)
        surface.restore()
        result = surface.image
    """

    def __init__(self, width: int, height: int):
        self._image = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
        self._matrix: Matrix = IDENTITY
        self._alpha = 1.0
        self._font_spec: Optional[FontSpec] = None
        self._font: Optional[ImageFont.FreeTypeFont] = None
        self._fill = (0, 0, 0, 255)
        self._fill_style = "#000000"
        self._stack: List[tuple] = []
        self._batch: list = []
        self._resized: Dict[Tuple[int, int, int], Tuple[Image.Image, Image.Image]] = {}

    @classmethod
    def from_image(cls, image: Image.Image) -> "PillowSurface":
        """Create a surface of ``image``'s size with ``image`` drawn at (0, 0)."""
        surface = cls(image.width, image.height)
        surface.draw_image(image, 0, 0, image.width, image.height)
        return surface

    # ----- geometry -----

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def image(self) -> Image.Image:
        """The surface pixels, with all pending draws applied."""
        self.flush()
        return self._image

    # ----- state -----

    @property
    def transform(self) -> Matrix:
        return self._matrix

    @property
    def global_alpha(self) -> float:
        return self._alpha

    @global_alpha.setter
    def global_alpha(self, value: float):
        value = float(value)
        if value != self._alpha:
            self.flush()
            self._alpha = value

    @property
    def fill_style(self) -> str:
        return self._fill_style

    @fill_style.setter
    def fill_style(self, value: str):
        try:
            self._fill = ImageColor.getcolor(value, "RGBA")
        except ValueError:
            logger.debug("Ignoring unparseable fill style %r", value)
            return
        self._fill_style = value

    def save(self):
        self._stack.append((self._matrix, self._alpha, self._font_spec, self._font, self._fill, self._fill_style))

    def restore(self):
        if not self._stack:
            return
        self.flush()
        self._matrix, self._alpha, self._font_spec, self._font, self._fill, self._fill_style = self._stack.pop()

    def translate(self, x: float, y: float):
        if x == 0 and y == 0:
            return
        self.flush()
        self._matrix = multiply(self._matrix, (1.0, 0.0, 0.0, 1.0, float(x), float(y)))

    def rotate(self, radians: float):
        if radians == 0:
            return
        self.flush()
        cos, sin = math.cos(radians), math.sin(radians)
        self._matrix = multiply(self._matrix, (cos, sin, -sin, cos, 0.0, 0.0))

    # ----- text -----

    @property
    def font(self) -> Optional[FontSpec]:
        return self._font_spec

    def set_font(self, spec: FontSpec):
        self._font_spec = spec
        self._font = get_font(spec)

    def measure_text(self, text: str) -> float:
        """Advance width of ``text`` in the current font."""
        if self._font is None:
            raise RuntimeError("set_font() must be called before measuring text")
        return float(self._font.getlength(text))

    def fill_text(self, text: str, x: float, y: float):
        """Draw ``text`` centred horizontally and vertically on (x, y)."""
        if not text:
            return
        if self._font is None:
            raise RuntimeError("set_font() must be called before drawing text")
        self._batch.append(_TextItem(text, float(x), float(y), self._font, self._fill))

    # ----- images -----

    def _resize(self, image: Image.Image, width: int, height: int) -> Image.Image:
        key = (id(image), width, height)
        cached = self._resized.get(key)
        if cached is not None and cached[0] is image:
            return cached[1]
        source = image if image.mode == "RGBA" else image.convert("RGBA")
        if source.size == (width, height):
            resized = source
        else:
            resized = source.resize((width, height), Image.Resampling.LANCZOS)
        self._resized[key] = (image, resized)
        return resized

    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float):
        """Draw ``image`` scaled to ``width`` x ``height`` with its top-left at (x, y)."""
        w = int(round(width))
        h = int(round(height))
        if w <= 0 or h <= 0:
            return
        self._batch.append(_ImageItem(self._resize(image, w, h), int(round(x)), int(round(y))))

    # ----- compositing -----

    def _visible_bounds(self, inverse: Matrix) -> Tuple[float, float, float, float]:
        corners = [
            apply(inverse, cx, cy)
            for cx, cy in ((0, 0), (self.width, 0), (0, self.height), (self.width, self.height))
        ]
        xs = [p[0] for p in corners]
        ys = [p[1] for p in corners]
        # slack for the bicubic kernel
        return min(xs) - 2, min(ys) - 2, max(xs) + 2, max(ys) + 2

    def flush(self):
        """Composite all pending draws onto the surface pixels."""
        items, self._batch = self._batch, []
        alpha = clamp_alpha(self._alpha)
        if not items or alpha <= 0:
            return

        inverse = invert(self._matrix)
        visible = self._visible_bounds(inverse)
        kept = []
        for item in items:
            bounds = item.bounds()
            if _intersects(bounds, visible):
                kept.append((item, bounds))
        if not kept:
            return

        left = max(math.floor(min(b[0] for _, b in kept)), math.floor(visible[0]))
        top = max(math.floor(min(b[1] for _, b in kept)), math.floor(visible[1]))
        right = min(math.ceil(max(b[2] for _, b in kept)), math.ceil(visible[2]))
        bottom = min(math.ceil(max(b[3] for _, b in kept)), math.ceil(visible[3]))
        if right <= left or bottom <= top:
            return

        layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for item, _ in kept:
            item.render(draw, layer, left, top)

        if alpha < 1.0:
            layer.putalpha(layer.getchannel("A").point(lambda value: round(value * alpha)))

        if _is_integer_translation(self._matrix):
            composite_at(self._image, layer, left + int(self._matrix[4]), top + int(self._matrix[5]))
            return

        ia, ib, ic, id_, ie, if_ = inverse
        warped = layer.transform(
            self._image.size,
            Image.Transform.AFFINE,
            (ia, ic, ie - left, ib, id_, if_ - top),
            resample=Image.Resampling.BICUBIC,
        )
        self._image.alpha_composite(warped)
