"""
Suggest Worker - Async Text Suggestion
======================================
Runs the watermark text suggestion call off the UI thread.
"""

import logging
from typing import Optional

from PyQt6.QtCore import QThread, pyqtSignal

from ..services.suggestion import suggest_watermark_text
from ..settings import AppSettings

logger = logging.getLogger(__name__)


class SuggestWorker(QThread):
    """
    Worker thread for one suggestion request.

    Signals:
        suggestion_ready(str): The suggested text (or the fallback text).
    """

    suggestion_ready = pyqtSignal(str)

    def __init__(
            self,
            image_bytes: bytes,
            mime_type: str,
            settings: Optional[AppSettings] = None,
            client=None,
            parent=None
    ):
        super().__init__(parent)
        self._image_bytes = image_bytes
        self._mime_type = mime_type
        self._settings = settings
        self._client = client

    def run(self):
        logger.debug("Requesting watermark suggestion for %s image", self._mime_type)
        text = suggest_watermark_text(
            self._image_bytes,
            self._mime_type,
            client=self._client,
            settings=self._settings,
        )
        self.suggestion_ready.emit(text)
