"""
Slideshow generation orchestrator

Public entry point of the engine: validates preconditions, acquires product
images, negotiates the codec, drives the scheduler into a capture session and
assembles the finished ``GeneratedVideo``. Runs are serialized; a second
``generate()`` while one is in flight is rejected.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Sequence

from .config import Settings
from .core.selection import filter_items
from .encoding.codecs import FfmpegCapabilities, negotiate
from .encoding.session import CaptureSession
from .models import (
    CatalogItem,
    GeneratedVideo,
    GenerationSession,
    GenerationStatus,
    SlideTexts,
    VideoConfig,
)
from .rendering.fonts import FontSet
from .rendering.surface import Surface
from .scheduler import (
    CancellationToken,
    Phase,
    SlideshowScheduler,
    build_timeline,
    make_pacer,
    nominal_duration,
)
from .services.errors import (
    GenerationCancelled,
    GenerationInProgressError,
    PreconditionError,
    SlideshowError,
)
from .services.images import ImageAcquirer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

# Progress bands reported to the caller
ACQUIRE_END = 30
RENDER_END = 90
FINALIZE = 95


class SlideshowGenerator:
    """Generates product slideshow videos.

    Args:
        settings: engine settings (canvas, timing, codecs, palette, fonts)
        connectivity_probe: callable returning True when the backend is
            reachable; consulted before each run when given
        acquirer: image acquirer (defaults to one built from ``settings``)
        capabilities: encoder capability probe with ``is_supported`` and
            ``encoder_for``
        session_factory: ``(mime_type, encoder) -> CaptureSession``
        clock: wall clock used for the artifact id
    """

    def __init__(self, settings: Optional[Settings] = None,
                 connectivity_probe: Optional[Callable[[], bool]] = None,
                 acquirer: Optional[ImageAcquirer] = None,
                 capabilities=None,
                 session_factory: Optional[Callable[[str, Optional[str]], CaptureSession]] = None,
                 clock: Callable[[], float] = time.time):
        self.settings = settings or Settings()
        self.connectivity_probe = connectivity_probe
        self.acquirer = acquirer or ImageAcquirer(base_url=self.settings.base_url,
                                                  timeout=self.settings.image_timeout)
        self.capabilities = capabilities or FfmpegCapabilities()
        self.session_factory = session_factory or (lambda mime, encoder: CaptureSession(mime, encoder))
        self.clock = clock
        self.session = GenerationSession()
        self._lock = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self.session.status == GenerationStatus.GENERATING

    def _report(self, percent: float, message: str, on_progress: Optional[ProgressCallback]) -> None:
        if self.session.report(percent, message):
            logger.info("[%3d%%] %s", self.session.percent, message)
            if on_progress is not None:
                on_progress(self.session.percent, self.session.message)

    def check_preconditions(self, items: Sequence[CatalogItem], config: VideoConfig):
        """Return the filtered items or raise ``PreconditionError``."""
        if self.connectivity_probe is not None:
            try:
                online = bool(self.connectivity_probe())
            except Exception as e:
                logger.error("Connectivity probe failed: %s", e)
                online = False
            if not online:
                raise PreconditionError("Backend not available. Check that the server is running.")
        selected = filter_items(items, config)
        if not selected:
            raise PreconditionError("No products available with the selected filters.")
        settings = self.settings
        try:
            build_timeline(len(selected), config.product_duration, settings.fps, settings.entrance_frames,
                           settings.intro_seconds, settings.outro_seconds)
        except ValueError as e:
            raise PreconditionError(str(e)) from e
        return selected

    def generate(self, items: Sequence[CatalogItem], config: VideoConfig,
                 texts: Optional[SlideTexts] = None,
                 on_progress: Optional[ProgressCallback] = None,
                 cancel: Optional[CancellationToken] = None) -> GeneratedVideo:
        """Run one generation and return the finished video.

        Raises ``PreconditionError`` without starting a run, or re-raises the
        fatal error that aborted the run after recording it on ``self.session``.
        """
        if not self._lock.acquire(blocking=False):
            raise GenerationInProgressError("A video is already being generated")
        try:
            selected = self.check_preconditions(items, config)
            return self._run(selected, config, texts or SlideTexts(), on_progress, cancel or CancellationToken())
        finally:
            self._lock.release()

    def _run(self, items, config: VideoConfig, texts: SlideTexts, on_progress, cancel) -> GeneratedVideo:
        settings = self.settings
        self.session = GenerationSession(status=GenerationStatus.GENERATING)
        self._report(0, "Preparing canvas for video...", on_progress)
        capture = None
        try:
            surface = Surface(settings.width, settings.height, settings.palette.background)

            self._report(0, "Loading product images...", on_progress)
            bitmaps = self.acquirer.acquire_all(
                items,
                on_progress=lambda done, total: self._report(
                    done / total * ACQUIRE_END, f"Loaded image {done} of {total}", on_progress),
            )
            cancel.raise_if_cancelled()

            mime_type = negotiate(settings.codecs, self.capabilities.is_supported)
            encoder = self.capabilities.encoder_for(mime_type)
            self._report(ACQUIRE_END, "Starting video recording...", on_progress)
            capture = self.session_factory(mime_type, encoder)
            capture.start(surface, settings.fps)

            def on_phase(phase: Phase, index, total):
                if phase == Phase.INTRO:
                    self._report(ACQUIRE_END, "Rendering introduction...", on_progress)
                elif phase == Phase.ENTRANCE:
                    self._report(ACQUIRE_END + index / total * (RENDER_END - ACQUIRE_END),
                                 f"Rendering product {index + 1} of {total}: {items[index].title}", on_progress)
                elif phase == Phase.OUTRO:
                    self._report(RENDER_END, "Rendering closing...", on_progress)

            scheduler = SlideshowScheduler(
                surface, capture, settings, FontSet(settings.serif_font, settings.sans_font),
                pacer=make_pacer(settings.pacing), cancel=cancel,
            )
            scheduler.run(items, bitmaps, config, texts, on_phase=on_phase)

            self._report(FINALIZE, "Finalizing video...", on_progress)
            encoded = capture.stop()
            capture = None

            video = GeneratedVideo(
                data=encoded.data,
                mime_type=encoded.mime_type,
                id=f"slideshow_{int(self.clock() * 1000)}",
                items=tuple(items),
                config=config,
                duration_seconds=nominal_duration(len(items), config.product_duration,
                                                  settings.intro_seconds, settings.outro_seconds),
            )
        except GenerationCancelled as e:
            self._fail(GenerationStatus.CANCELLED, str(e), capture)
            raise
        except SlideshowError as e:
            self._fail(GenerationStatus.ERROR, str(e), capture)
            raise
        except Exception as e:
            logger.exception("Unexpected error while generating video")
            self._fail(GenerationStatus.ERROR, str(e) or "Unknown error while generating the video", capture)
            raise

        self.session.status = GenerationStatus.SUCCESS
        self._report(100, "Video generated successfully!", on_progress)
        logger.info("Video %s ready: %s, %d bytes, %.1fs", video.id, video.mime_type,
                    video.byte_size, video.duration_seconds)
        return video

    def _fail(self, status: GenerationStatus, message: str, capture) -> None:
        if capture is not None:
            capture.abort()
        self.session.status = status
        self.session.error = message
        self.session.message = message
        logger.error("Video generation %s: %s", status.value, message)
