"""
Raster Decoding
===============
Loads base images and watermark rasters into fully decoded Pillow images.

Technical Notes:
- Pillow opens images lazily; ``Image.load()`` is the point where pixels are
  actually decoded, so every decode path calls it before returning
- Base images honour EXIF orientation so the surface matches what viewers show
- Watermark rasters are decoded once and cached; later decodes are synchronous
"""

import io
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path]

DEFAULT_FORMAT = "PNG"


def _open_source(source: ImageSource) -> Image.Image:
    """Open ``source`` and force a full decode."""
    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(io.BytesIO(bytes(source)))
        else:
            image = Image.open(Path(source))
        image.load()
    except FileNotFoundError as ex:
        raise DecodeError(f"Image not found: {source}") from ex
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as ex:
        raise DecodeError(f"Failed to decode image: {ex}") from ex
    return image


@dataclass(frozen=True)
class DecodedImage:
    """A decoded base image together with the format it was uploaded in."""
    image: Image.Image
    format: str
    mime_type: str

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def decode_base_image(source: ImageSource) -> DecodedImage:
    """
    Decode the photograph that will receive the watermark.

    Args:
        source: Encoded image bytes, or a path to an image file.

    Returns:
        DecodedImage holding the RGBA pixels at native resolution.

    Raises:
        DecodeError: If the data cannot be read as an image.
    """
    image = _open_source(source)
    fmt = image.format or DEFAULT_FORMAT
    mime_type = Image.MIME.get(fmt.upper(), "image/png")

    image = ImageOps.exif_transpose(image)
    if image.mode != "RGBA":
        image = image.convert("RGBA")

    logger.debug("Decoded base image %dx%d (%s)", image.width, image.height, fmt)
    return DecodedImage(image=image, format=fmt, mime_type=mime_type)


class WatermarkRaster:
    """
    A watermark image payload that is decoded on first use.

    The raster keeps the encoded source around until ``decode()`` is called,
    then holds an RGBA copy of the pixels. Decoding twice is a cache hit.
    """

    def __init__(self, source: Optional[ImageSource] = None, image: Optional[Image.Image] = None):
        if source is None and image is None:
            raise ValueError("WatermarkRaster needs a source or an image")
        self._source = source
        self._image: Optional[Image.Image] = None
        self._lock = threading.Lock()
        if image is not None:
            image.load()
            self._image = image if image.mode == "RGBA" else image.convert("RGBA")

    @classmethod
    def from_bytes(cls, data: bytes) -> "WatermarkRaster":
        return cls(source=bytes(data))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "WatermarkRaster":
        return cls(source=Path(path))

    @classmethod
    def from_image(cls, image: Image.Image) -> "WatermarkRaster":
        return cls(image=image)

    @property
    def is_decoded(self) -> bool:
        return self._image is not None

    def decode(self) -> Image.Image:
        """
        Return the fully decoded RGBA pixels, decoding them if needed.

        Raises:
            DecodeError: If the source cannot be decoded.
        """
        with self._lock:
            if self._image is None:
                image = _open_source(self._source)
                self._image = image if image.mode == "RGBA" else image.convert("RGBA")
            return self._image

    @property
    def native_size(self) -> Tuple[int, int]:
        return self.decode().size

    def __repr__(self) -> str:
        state = f"{self._image.width}x{self._image.height}" if self._image else "pending"
        return f"WatermarkRaster({state})"
