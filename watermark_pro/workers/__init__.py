"""
Workers Module - Async Thread Management
========================================
Contains QThread workers that keep rendering and the suggestion call off the
UI thread.

Components:
- RenderWorker: One full render pass
- RenderManager: Debounced render scheduling that drops superseded results
- SuggestWorker: Watermark text suggestion
"""

from .render_worker import (
    RenderWorker, RenderRequest, RenderDebouncer, RenderManager,
    clear_base_cache, get_decoded_base
)
from .suggest_worker import SuggestWorker

__all__ = [
    # Render
    "RenderWorker",
    "RenderRequest",
    "RenderDebouncer",
    "RenderManager",
    "clear_base_cache",
    "get_decoded_base",
    # Suggest
    "SuggestWorker",
]
