"""
Tests for the suggestion service and application settings.

The Gemini client is replaced by a fake; no network access is needed.

Run with: python -m pytest tests/test_services.py -v
"""

import sys
from pathlib import Path
from types import SimpleNamespace

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watermark_pro.services.suggestion import PROMPT, suggest_watermark_text
from watermark_pro.settings import (
    DEFAULT_DEBOUNCE_MS, DEFAULT_MODEL, DEFAULT_SUGGESTION, AppSettings, load_settings
)

SETTINGS = AppSettings(api_key="test-key")


class FakeModels:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append((model, contents))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


def fake_client(reply=None, error=None):
    return SimpleNamespace(models=FakeModels(reply, error))


def test_suggestion_is_trimmed():
    client = fake_client("  Sunset Photography \n")
    assert suggest_watermark_text(b"\xff\xd8", "image/jpeg", client=client, settings=SETTINGS) == "Sunset Photography"


def test_request_carries_image_and_prompt():
    client = fake_client("Urban Architecture")
    suggest_watermark_text(b"png-bytes", "image/png", client=client, settings=SETTINGS)

    model, contents = client.models.calls[0]
    assert model == DEFAULT_MODEL
    part, prompt = contents
    assert prompt == PROMPT
    assert part.inline_data.data == b"png-bytes"
    assert part.inline_data.mime_type == "image/png"


def test_failure_returns_fallback():
    client = fake_client(error=RuntimeError("quota exceeded"))
    assert suggest_watermark_text(b"x", "image/png", client=client, settings=SETTINGS) == DEFAULT_SUGGESTION


def test_empty_reply_returns_fallback():
    for reply in (None, "", "   "):
        client = fake_client(reply)
        assert suggest_watermark_text(b"x", "image/png", client=client, settings=SETTINGS) == DEFAULT_SUGGESTION


def test_custom_fallback_and_model():
    settings = AppSettings(suggestion_model="gemini-test", suggestion_fallback="All rights reserved")
    client = fake_client(error=ValueError("bad image"))
    assert suggest_watermark_text(b"x", "image/png", client=client, settings=settings) == "All rights reserved"
    assert client.models.calls[0][0] == "gemini-test"


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.api_key is None
    assert settings.suggestion_model == DEFAULT_MODEL
    assert settings.suggestion_fallback == DEFAULT_SUGGESTION
    assert settings.preview_debounce_ms == DEFAULT_DEBOUNCE_MS


def test_load_settings_from_environment():
    settings = load_settings({
        "API_KEY": "legacy",
        "GEMINI_API_KEY": "preferred",
        "WATERMARK_SUGGESTION_MODEL": "gemini-other",
        "WATERMARK_DEBOUNCE_MS": "120",
    })
    assert settings.api_key == "preferred"
    assert settings.suggestion_model == "gemini-other"
    assert settings.preview_debounce_ms == 120

    assert load_settings({"API_KEY": "legacy"}).api_key == "legacy"


def test_invalid_debounce_falls_back():
    assert load_settings({"WATERMARK_DEBOUNCE_MS": "fast"}).preview_debounce_ms == DEFAULT_DEBOUNCE_MS
    assert load_settings({"WATERMARK_DEBOUNCE_MS": "-5"}).preview_debounce_ms == DEFAULT_DEBOUNCE_MS
