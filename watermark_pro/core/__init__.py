"""
Core Module - Pure Rendering Logic
==================================
This module contains no UI dependencies.
Placement, compositing, decoding and export are implemented here.
"""

from .compositor import IMAGE_TILE_PADDING, TEXT_TILE_PADDING, composite, tile
from .config import (
    DEFAULT_CONFIG, FONTS, ImagePayload, Position, SetImage, SetKind,
    SetPosition, SetText, TextPayload, WatermarkConfig, WatermarkKind, reduce
)
from .errors import DecodeError, WatermarkError
from .exporter import encode_image, export_filename, save_image
from .fonts import FontSpec
from .pipeline import RenderResult, render, render_decoded
from .placement import Anchor, CanvasGeometry, TileRule, resolve
from .raster import DecodedImage, WatermarkRaster, decode_base_image
from .surface import PillowSurface, Surface

__all__ = [
    # Config
    "WatermarkConfig",
    "TextPayload",
    "ImagePayload",
    "WatermarkKind",
    "Position",
    "DEFAULT_CONFIG",
    "FONTS",
    "reduce",
    "SetKind",
    "SetText",
    "SetImage",
    "SetPosition",

    # Rendering
    "resolve",
    "Anchor",
    "TileRule",
    "CanvasGeometry",
    "composite",
    "tile",
    "TEXT_TILE_PADDING",
    "IMAGE_TILE_PADDING",
    "Surface",
    "PillowSurface",
    "FontSpec",
    "render",
    "render_decoded",
    "RenderResult",

    # Rasters
    "WatermarkRaster",
    "DecodedImage",
    "decode_base_image",

    # Export
    "encode_image",
    "export_filename",
    "save_image",

    # Errors
    "WatermarkError",
    "DecodeError",
]
