"""
Render Worker - Background Render Passes
========================================

Every settings change asks for a full re-render of the photo. Slider drags
produce dozens of changes per second, so requests are debounced and each one
starts a fresh pass in a QThread.

SUPERSEDING:
------------
Passes are never forcibly stopped. Each pass carries a generation number;
when it finishes, its result is only forwarded if no newer pass has been
requested in the meantime. A stale pass is wasted work, never a wrong frame.

DECODING:
---------
The base photo is decoded once per source and reused by later passes. The
watermark raster, if any, is decoded inside the pass before anything is
drawn.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from PyQt6.QtCore import QMutex, QMutexLocker, QObject, QThread, QTimer, pyqtSignal

from ..core.config import WatermarkConfig
from ..core.errors import WatermarkError
from ..core.pipeline import RenderResult, render_decoded
from ..core.raster import DecodedImage, ImageSource, decode_base_image
from ..settings import load_settings

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST
# =============================================================================

@dataclass(frozen=True)
class RenderRequest:
    """A base image plus the settings snapshot to render over it."""
    source: Union[ImageSource, DecodedImage]
    config: WatermarkConfig


# =============================================================================
# BASE IMAGE CACHE
# =============================================================================

_base_cache: Dict[object, DecodedImage] = {}
_base_cache_lock = QMutex()

MAX_BASE_CACHE_SIZE = 4


def _cache_key(source):
    if isinstance(source, (bytes, bytearray)):
        return ("bytes", hashlib.sha256(source).digest())
    return ("path", str(source))


def get_decoded_base(source: Union[ImageSource, DecodedImage]) -> DecodedImage:
    """
    Decode ``source``, reusing an earlier decode of the same source.

    Raises:
        DecodeError: If the image can't be decoded.
    """
    if isinstance(source, DecodedImage):
        return source

    key = _cache_key(source)
    with QMutexLocker(_base_cache_lock):
        cached = _base_cache.get(key)
    if cached is not None:
        return cached

    decoded = decode_base_image(source)

    with QMutexLocker(_base_cache_lock):
        if len(_base_cache) >= MAX_BASE_CACHE_SIZE:
            oldest_key = next(iter(_base_cache))
            del _base_cache[oldest_key]
        _base_cache[key] = decoded
    return decoded


def clear_base_cache():
    """Drop cached base images (call when the photo is replaced)."""
    with QMutexLocker(_base_cache_lock):
        _base_cache.clear()


# =============================================================================
# RENDER WORKER
# =============================================================================

class RenderWorker(QThread):
    """
    Worker thread running one render pass.

    SIGNALS:
    - render_ready(int, RenderResult): generation and result
    - render_error(int, str): generation and error message
    """

    render_ready = pyqtSignal(int, object)
    render_error = pyqtSignal(int, str)

    def __init__(self, request: RenderRequest, generation: int = 0, parent=None):
        super().__init__(parent)
        self.request = request
        self.generation = generation

    def run(self):
        try:
            base = get_decoded_base(self.request.source)
            result = render_decoded(base, self.request.config)
        except WatermarkError as e:
            logger.warning("Render pass %d failed: %s", self.generation, e)
            self.render_error.emit(self.generation, str(e))
            return
        except Exception as e:
            logger.exception("Render pass %d crashed", self.generation)
            self.render_error.emit(self.generation, f"Render failed: {e}")
            return

        self.render_ready.emit(self.generation, result)


# =============================================================================
# DEBOUNCER
# =============================================================================

class RenderDebouncer(QObject):
    """
    Collapses bursts of render requests into one.

    Only the last request within the debounce window fires.
    """

    render_requested = pyqtSignal(object)

    def __init__(self, delay_ms: int = 50, parent=None):
        super().__init__(parent)
        self._delay_ms = delay_ms
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)
        self._pending: Optional[RenderRequest] = None
        self._mutex = QMutex()

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    def request_render(self, request: RenderRequest):
        with QMutexLocker(self._mutex):
            self._pending = request
            self._timer.stop()
            self._timer.start(self._delay_ms)

    def cancel(self):
        with QMutexLocker(self._mutex):
            self._timer.stop()
            self._pending = None

    def _on_timeout(self):
        with QMutexLocker(self._mutex):
            request, self._pending = self._pending, None
        if request is not None:
            self.render_requested.emit(request)


# =============================================================================
# RENDER MANAGER
# =============================================================================

class RenderManager(QObject):
    """
    Schedules render passes and forwards only the newest result.

    USAGE:
        manager = RenderManager()  # delay from WATERMARK_DEBOUNCE_MS
        manager.render_updated.connect(on_render_ready)
        manager.request_render(RenderRequest(photo_bytes, config))
    """

    render_updated = pyqtSignal(object)  # RenderResult
    render_error = pyqtSignal(str)
    render_started = pyqtSignal()

    def __init__(self, debounce_ms: Optional[int] = None, parent=None):
        super().__init__(parent)
        if debounce_ms is None:
            debounce_ms = load_settings().preview_debounce_ms
        self._debouncer = RenderDebouncer(debounce_ms, self)
        self._debouncer.render_requested.connect(self._start_worker)

        self._generation = 0
        # Workers are kept referenced until their thread finishes
        self._workers: Dict[int, RenderWorker] = {}
        self._mutex = QMutex()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def debounce_ms(self) -> int:
        return self._debouncer.delay_ms

    def request_render(self, request: RenderRequest):
        """Request a render pass (debounced)."""
        self._debouncer.request_render(request)

    def render_now(self, request: RenderRequest):
        """Start a render pass immediately, superseding any running pass."""
        self._debouncer.cancel()
        self._start_worker(request)

    def cancel(self):
        """Drop pending requests and ignore results of running passes."""
        self._debouncer.cancel()
        with QMutexLocker(self._mutex):
            self._generation += 1

    def clear_cache(self):
        clear_base_cache()

    def wait_for_idle(self, timeout_ms: int = 30000) -> bool:
        """Block until all running passes have finished."""
        with QMutexLocker(self._mutex):
            workers = list(self._workers.values())
        return all(worker.wait(timeout_ms) for worker in workers)

    def _start_worker(self, request: RenderRequest):
        with QMutexLocker(self._mutex):
            self._generation += 1
            generation = self._generation
            worker = RenderWorker(request, generation)
            self._workers[generation] = worker

        worker.render_ready.connect(self._on_render_ready)
        worker.render_error.connect(self._on_render_error)
        worker.finished.connect(lambda: self._on_worker_finished(generation))

        self.render_started.emit()
        worker.start()

    def _is_current(self, generation: int) -> bool:
        with QMutexLocker(self._mutex):
            return generation == self._generation

    def _on_render_ready(self, generation: int, result: RenderResult):
        if not self._is_current(generation):
            logger.debug("Dropping stale render pass %d", generation)
            return
        self.render_updated.emit(result)

    def _on_render_error(self, generation: int, error: str):
        if not self._is_current(generation):
            return
        self.render_error.emit(error)

    def _on_worker_finished(self, generation: int):
        with QMutexLocker(self._mutex):
            worker = self._workers.pop(generation, None)
        if worker is not None:
            worker.deleteLater()
