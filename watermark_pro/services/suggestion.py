"""
Watermark Text Suggestion
=========================
Asks a Gemini model for a short watermark text that fits the photo.

The service never raises: any failure, or an empty reply, returns the
fallback text so the caller can always fill the text field.
"""

import logging
from typing import Optional

from google import genai
from google.genai import types

from ..settings import AppSettings, load_settings

logger = logging.getLogger(__name__)

PROMPT = (
    "Analyze this image and generate a short, professional watermark text that "
    "describes the vibe or content. For example 'Sunset Photography', "
    "'Urban Architecture', 'Candid Moments'. Keep it under 4 words. "
    "Do not add quotes."
)


def suggest_watermark_text(
        image_bytes: bytes,
        mime_type: str,
        client: Optional[genai.Client] = None,
        settings: Optional[AppSettings] = None
) -> str:
    """
    Suggest a watermark text for an image.

    Args:
        image_bytes: Encoded image as uploaded.
        mime_type: MIME type of ``image_bytes``, e.g. "image/jpeg".
        client: Optional preconfigured genai client.
        settings: Optional settings; read from the environment if omitted.

    Returns:
        The suggestion, or the configured fallback text on any failure.
    """
    settings = settings or load_settings()
    try:
        if client is None:
            client = genai.Client(api_key=settings.api_key)
        response = client.models.generate_content(
            model=settings.suggestion_model,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                PROMPT,
            ],
        )
        text = (response.text or "").strip()
    except Exception:
        logger.exception("Error generating watermark suggestion")
        return settings.suggestion_fallback

    return text or settings.suggestion_fallback
