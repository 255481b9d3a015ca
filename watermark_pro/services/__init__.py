"""
Services Module - External Collaborators
========================================
Calls to outside services. Nothing here is needed to render a watermark.
"""

from .suggestion import suggest_watermark_text

__all__ = ["suggest_watermark_text"]
