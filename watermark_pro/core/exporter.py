"""
Exporter
========
Encodes a watermarked image in the format of the original upload and writes
it to disk as ``watermarked-<original name>``.
"""

import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "watermarked-"
JPEG_QUALITY = 95

# Formats that cannot store an alpha channel
_OPAQUE_FORMATS = {"JPEG", "BMP", "PPM"}


def export_filename(original_name: str) -> str:
    return f"{EXPORT_PREFIX}{Path(original_name).name}"


def _prepare(image: Image.Image, fmt: str) -> Image.Image:
    if fmt in _OPAQUE_FORMATS and image.mode == "RGBA":
        # Flatten onto white, as browsers do when exporting to JPEG
        flattened = Image.new("RGB", image.size, (255, 255, 255))
        flattened.paste(image, mask=image.getchannel("A"))
        return flattened
    return image


def encode_image(image: Image.Image, fmt: str) -> bytes:
    """
    Encode ``image`` as ``fmt`` (a Pillow format name such as "JPEG").

    Returns:
        The encoded bytes.
    """
    fmt = (fmt or "PNG").upper()
    buffer = io.BytesIO()
    prepared = _prepare(image, fmt)
    if fmt == "JPEG":
        prepared.save(buffer, format=fmt, quality=JPEG_QUALITY)
    else:
        prepared.save(buffer, format=fmt)
    return buffer.getvalue()


def save_image(
        image: Image.Image,
        original_name: str,
        fmt: str,
        output_dir: Union[str, Path]
) -> Path:
    """
    Write ``image`` next to the other exports.

    Args:
        image: Watermarked image.
        original_name: File name of the upload; the export is prefixed.
        fmt: Pillow format name of the upload.
        output_dir: Destination directory, created if missing.

    Returns:
        Path of the written file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / export_filename(original_name)
    output_path.write_bytes(encode_image(image, fmt))
    logger.info("Exported %s", output_path)
    return output_path
