"""
Application Settings
====================
Runtime settings read from the environment.

Variables:
    GEMINI_API_KEY / API_KEY     Key for the text suggestion service
    WATERMARK_SUGGESTION_MODEL   Model name (default: gemini-2.5-flash)
    WATERMARK_DEBOUNCE_MS        Delay before a settings change re-renders
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_SUGGESTION = "Copyright 2024"
DEFAULT_DEBOUNCE_MS = 50


@dataclass(frozen=True)
class AppSettings:
    api_key: Optional[str] = None
    suggestion_model: str = DEFAULT_MODEL
    suggestion_fallback: str = DEFAULT_SUGGESTION
    preview_debounce_ms: int = DEFAULT_DEBOUNCE_MS


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, expected an integer", name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%d", name, value)
        return default
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Build AppSettings from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return AppSettings(
        api_key=env.get("GEMINI_API_KEY") or env.get("API_KEY") or None,
        suggestion_model=env.get("WATERMARK_SUGGESTION_MODEL") or DEFAULT_MODEL,
        preview_debounce_ms=_int_setting(env, "WATERMARK_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
    )
