"""
Watermark Configuration
=======================
Immutable settings snapshot consumed by the compositor.

A new WatermarkConfig is produced every time a setting changes. Updates go
through ``reduce()`` with a typed action, which only ever touches the payload
that matches the action (text or image), so the two payloads can't drift into
a mixed state.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Optional, Union

from .raster import WatermarkRaster


class WatermarkKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class Position(str, Enum):
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CUSTOM = "custom"
    TILE = "tile"


FONTS = (
    "Arial",
    "Verdana",
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Georgia",
    "Palatino",
    "Garamond",
    "Comic Sans MS",
    "Trebuchet MS",
    "Arial Black",
    "Impact",
)


@dataclass(frozen=True)
class TextPayload:
    """Text watermark settings."""
    content: str = "CONFIDENTIAL"
    font_family: str = "Arial"
    font_size: float = 48
    color: str = "#ffffff"
    opacity: float = 0.8
    rotation: float = 0.0  # degrees
    bold: bool = True
    italic: bool = False


@dataclass(frozen=True)
class ImagePayload:
    """Image watermark settings. ``scale`` is a percentage, 50 = native size."""
    source: Optional[WatermarkRaster] = None
    scale: float = 50
    opacity: float = 0.8
    rotation: float = 0.0  # degrees


@dataclass(frozen=True)
class WatermarkConfig:
    """
    Full watermark settings for one render.

    ``position`` is kept as a plain string so that values outside the
    Position enum reach the placement resolver, which maps them to a fallback.
    """
    kind: str = WatermarkKind.TEXT.value
    position: str = Position.CENTER.value
    custom_x: float = 50  # percent of width
    custom_y: float = 50  # percent of height
    tile_gap: float = 50
    text: TextPayload = field(default_factory=TextPayload)
    image: ImagePayload = field(default_factory=ImagePayload)

    @property
    def is_tiled(self) -> bool:
        return self.position == Position.TILE.value


DEFAULT_CONFIG = WatermarkConfig()


# =============================================================================
# ACTIONS
# =============================================================================

@dataclass(frozen=True)
class SetKind:
    kind: str


@dataclass(frozen=True)
class SetText:
    field: str
    value: object


@dataclass(frozen=True)
class SetImage:
    field: str
    value: object


@dataclass(frozen=True)
class SetPosition:
    mode: str
    custom_x: Optional[float] = None
    custom_y: Optional[float] = None
    tile_gap: Optional[float] = None


Action = Union[SetKind, SetText, SetImage, SetPosition]

_TEXT_FIELDS = frozenset(f.name for f in fields(TextPayload))
_IMAGE_FIELDS = frozenset(f.name for f in fields(ImagePayload))


def _enum_value(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def reduce(config: WatermarkConfig, action: Action) -> WatermarkConfig:
    """
    Apply a single settings change and return the new config.

    SetText is ignored unless the text payload is active, and SetImage unless
    the image payload is active. Switching kind keeps both payloads, so going
    back restores the previous values.

    Args:
        config: Current settings.
        action: The change to apply.

    Returns:
        A new WatermarkConfig (or ``config`` itself when nothing changes).

    Raises:
        ValueError: If the action names a field the payload doesn't have.
        TypeError: If ``action`` is not a known action type.
    """
    if isinstance(action, SetKind):
        return replace(config, kind=_enum_value(action.kind))

    if isinstance(action, SetText):
        if action.field not in _TEXT_FIELDS:
            raise ValueError(f"Unknown text field: {action.field}")
        if config.kind != WatermarkKind.TEXT.value:
            return config
        return replace(config, text=replace(config.text, **{action.field: action.value}))

    if isinstance(action, SetImage):
        if action.field not in _IMAGE_FIELDS:
            raise ValueError(f"Unknown image field: {action.field}")
        if config.kind != WatermarkKind.IMAGE.value:
            return config
        return replace(config, image=replace(config.image, **{action.field: action.value}))

    if isinstance(action, SetPosition):
        changes = {"position": _enum_value(action.mode)}
        if action.custom_x is not None:
            changes["custom_x"] = action.custom_x
        if action.custom_y is not None:
            changes["custom_y"] = action.custom_y
        if action.tile_gap is not None:
            changes["tile_gap"] = action.tile_gap
        return replace(config, **changes)

    raise TypeError(f"Unsupported action: {action!r}")
