"""Exceptions raised by the core package."""


class WatermarkError(RuntimeError):
    """Base class for watermark processing failures."""


class DecodeError(WatermarkError):
    """Raised when a base image or watermark raster cannot be decoded."""
