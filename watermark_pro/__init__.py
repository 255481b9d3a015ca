"""
Watermark Pro Package
=====================
Renders a text or image watermark onto a photo and exports the result.

Modules:
    - core: Pure rendering logic (no Qt dependencies)
    - workers: QThread workers for background render passes
    - services: AI watermark text suggestion

Usage:
    from watermark_pro.core import DEFAULT_CONFIG, render
    from watermark_pro.workers import RenderManager, RenderRequest
"""

__version__ = "1.0.0"
__app_name__ = "Watermark Pro"

from .core import (
    DEFAULT_CONFIG,
    WatermarkConfig,
    TextPayload,
    ImagePayload,
    WatermarkRaster,
    composite,
    render,
    resolve,
)

__all__ = [
    # Version info
    "__version__",
    "__app_name__",

    # Core
    "DEFAULT_CONFIG",
    "WatermarkConfig",
    "TextPayload",
    "ImagePayload",
    "WatermarkRaster",
    "composite",
    "render",
    "resolve",
]
