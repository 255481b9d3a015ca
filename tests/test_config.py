"""
Tests for the settings model and reducer.

Run with: python -m pytest tests/test_config.py -v
"""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watermark_pro.core.config import (
    DEFAULT_CONFIG, FONTS, Position, SetImage, SetKind, SetPosition, SetText,
    WatermarkConfig, WatermarkKind, reduce
)


def test_defaults():
    config = DEFAULT_CONFIG
    assert config.kind == "text"
    assert config.position == "center"
    assert (config.custom_x, config.custom_y, config.tile_gap) == (50, 50, 50)
    assert config.text.content == "CONFIDENTIAL"
    assert config.text.font_family == "Arial"
    assert config.text.font_size == 48
    assert config.text.bold and not config.text.italic
    assert config.image.source is None
    assert config.image.scale == 50
    assert config.text.font_family in FONTS


def test_config_is_immutable():
    with pytest.raises(FrozenInstanceError):
        DEFAULT_CONFIG.position = "tile"


def test_set_text_updates_active_text_payload():
    config = reduce(DEFAULT_CONFIG, SetText("content", "Sample"))
    assert config.text.content == "Sample"
    assert DEFAULT_CONFIG.text.content == "CONFIDENTIAL"


def test_set_text_ignored_when_image_is_active():
    image_config = reduce(DEFAULT_CONFIG, SetKind(WatermarkKind.IMAGE))
    assert reduce(image_config, SetText("opacity", 0.1)) is image_config


def test_set_image_ignored_when_text_is_active():
    assert reduce(DEFAULT_CONFIG, SetImage("scale", 100)) is DEFAULT_CONFIG


def test_set_image_updates_image_payload():
    config = reduce(DEFAULT_CONFIG, SetKind("image"))
    config = reduce(config, SetImage("rotation", 45))
    assert config.image.rotation == 45
    assert config.text.rotation == 0


def test_switching_kind_keeps_both_payloads():
    config = reduce(DEFAULT_CONFIG, SetText("color", "#ff0000"))
    config = reduce(config, SetKind("image"))
    config = reduce(config, SetImage("opacity", 0.3))
    config = reduce(config, SetKind("text"))
    assert config.text.color == "#ff0000"
    assert config.image.opacity == 0.3


def test_unknown_fields_are_rejected():
    with pytest.raises(ValueError):
        reduce(DEFAULT_CONFIG, SetText("scale", 10))
    with pytest.raises(ValueError):
        reduce(DEFAULT_CONFIG, SetImage("content", "x"))


def test_set_position_keeps_unspecified_params():
    config = reduce(DEFAULT_CONFIG, SetPosition(Position.CUSTOM, custom_x=10, custom_y=90))
    assert config.position == "custom"
    assert (config.custom_x, config.custom_y) == (10, 90)

    config = reduce(config, SetPosition("tile", tile_gap=120))
    assert config.position == "tile"
    assert config.is_tiled
    assert config.tile_gap == 120
    assert (config.custom_x, config.custom_y) == (10, 90)


def test_unsupported_action():
    with pytest.raises(TypeError):
        reduce(WatermarkConfig(), "position=tile")
