"""
Font Resolution
===============
Maps a font family and style onto a Pillow TrueType font.

Families are looked up by their usual file names on Windows, macOS and Linux.
When none of them is installed the DejaVu family is tried, and finally the
font bundled with Pillow.
"""

import logging
import threading
from typing import Dict, List, NamedTuple, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)


class FontSpec(NamedTuple):
    family: str
    size: float
    bold: bool = False
    italic: bool = False

    def css(self) -> str:
        """Font shorthand in CSS order, e.g. ``italic bold 48px "Arial"``."""
        parts = []
        if self.italic:
            parts.append("italic")
        if self.bold:
            parts.append("bold")
        parts.append(f'{self.size:g}px "{self.family}"')
        return " ".join(parts)


# family -> (regular, bold, italic, bold italic) file stems
_FAMILY_FILES: Dict[str, Tuple[str, str, str, str]] = {
    "arial": ("arial", "arialbd", "ariali", "arialbi"),
    "verdana": ("verdana", "verdanab", "verdanai", "verdanaz"),
    "times new roman": ("times", "timesbd", "timesi", "timesbi"),
    "courier new": ("cour", "courbd", "couri", "courbi"),
    "georgia": ("georgia", "georgiab", "georgiai", "georgiaz"),
    "palatino": ("pala", "palab", "palai", "palabi"),
    "garamond": ("gara", "garabd", "garait", "garabd"),
    "comic sans ms": ("comic", "comicbd", "comici", "comicz"),
    "trebuchet ms": ("trebuc", "trebucbd", "trebucit", "trebucbi"),
    "arial black": ("ariblk", "ariblk", "ariblk", "ariblk"),
    "impact": ("impact", "impact", "impact", "impact"),
}

_FONT_DIRS = (
    "",
    "/usr/share/fonts/truetype/msttcorefonts/",
    "/Library/Fonts/",
    "/System/Library/Fonts/Supplemental/",
)

# Serif faces fall back to DejaVu Serif, monospace to DejaVu Sans Mono
_SERIF = {"times new roman", "georgia", "palatino", "garamond"}
_MONO = {"courier new"}

_DEJAVU_STYLES = {
    "DejaVuSans": ("", "-Bold", "-Oblique", "-BoldOblique"),
    "DejaVuSerif": ("", "-Bold", "-Italic", "-BoldItalic"),
    "DejaVuSansMono": ("", "-Bold", "-Oblique", "-BoldOblique"),
}

_font_cache: Dict[FontSpec, ImageFont.FreeTypeFont] = {}
_font_cache_lock = threading.Lock()

MAX_FONT_CACHE_SIZE = 50


def _style_index(bold: bool, italic: bool) -> int:
    return (1 if bold else 0) + (2 if italic else 0)


def _candidates(spec: FontSpec) -> List[str]:
    family = spec.family.strip().lower()
    index = _style_index(spec.bold, spec.italic)
    names: List[str] = []

    stems = _FAMILY_FILES.get(family)
    if stems is not None:
        for directory in _FONT_DIRS:
            names.append(f"{directory}{stems[index]}.ttf")
    # Files named after the family itself, e.g. "Helvetica.ttc"
    names.append(f"{spec.family}.ttf")
    names.append(f"{spec.family}.ttc")

    if family in _SERIF:
        dejavu = "DejaVuSerif"
    elif family in _MONO:
        dejavu = "DejaVuSansMono"
    else:
        dejavu = "DejaVuSans"
    suffix = _DEJAVU_STYLES[dejavu][index]
    names.append(f"{dejavu}{suffix}.ttf")
    names.append(f"/usr/share/fonts/truetype/dejavu/{dejavu}{suffix}.ttf")
    return names


def _load(spec: FontSpec) -> ImageFont.FreeTypeFont:
    for candidate in _candidates(spec):
        try:
            return ImageFont.truetype(candidate, spec.size)
        except OSError:
            continue
    logger.debug("No TrueType file for %s, using Pillow's bundled font", spec.css())
    return ImageFont.load_default(spec.size)


def get_font(spec: FontSpec) -> ImageFont.FreeTypeFont:
    """
    Get or create a cached font object for ``spec``.

    Args:
        spec: Family, pixel size and style.

    Returns:
        Font usable with ImageDraw.text and anchors.
    """
    with _font_cache_lock:
        font = _font_cache.get(spec)
    if font is not None:
        return font

    font = _load(spec)

    with _font_cache_lock:
        if len(_font_cache) >= MAX_FONT_CACHE_SIZE:
            oldest_key = next(iter(_font_cache))
            del _font_cache[oldest_key]
        _font_cache[spec] = font
    return font


def clear_font_cache():
    """Clear the global font cache."""
    with _font_cache_lock:
        _font_cache.clear()
