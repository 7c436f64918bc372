"""Animation scheduler.

Linear state machine ``IDLE -> INTRO -> (ENTRANCE -> HOLD) x N -> OUTRO -> DONE``.
Each phase is a fixed number of frames at the configured frame rate, so the
encoded timing matches the configured durations regardless of render speed.
Static phases (intro, hold, outro) are drawn once and their frame repeated.
"""
from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from slideshow_generator.core.animation import get_animation
from slideshow_generator.models import CatalogItem, SlideTexts, VideoConfig
from slideshow_generator.rendering.cards import render_intro, render_outro
from slideshow_generator.rendering.slide import prepare_bitmap, render_slide
from slideshow_generator.services.errors import GenerationCancelled, RenderError

logger = logging.getLogger(__name__)

# Frames written per encoder call while repeating a static frame offline
STATIC_CHUNK_FRAMES = 30


class Phase(str, enum.Enum):
    IDLE = "idle"
    INTRO = "intro"
    ENTRANCE = "entrance"
    HOLD = "hold"
    OUTRO = "outro"
    DONE = "done"


@dataclass(frozen=True)
class Segment:
    """One phase of the timeline with its frame count."""

    phase: Phase
    frames: int
    item_index: Optional[int] = None


def nominal_duration(n_items: int, hold_seconds: float, intro_seconds: float, outro_seconds: float) -> float:
    """Total video length; the entrance is included in each item's hold time."""
    return intro_seconds + n_items * hold_seconds + outro_seconds


def build_timeline(n_items: int, product_duration: float, fps: int, entrance_frames: int,
                   intro_seconds: float, outro_seconds: float) -> List[Segment]:
    """Ordered segments of a run. Raises ``ValueError`` if the entrance outlasts the hold."""
    per_item = int(round(product_duration * fps))
    hold = per_item - entrance_frames
    if hold < 0:
        raise ValueError(
            f"Product duration {product_duration}s is shorter than the entrance animation "
            f"({entrance_frames / fps:.2f}s)"
        )
    segments = [Segment(Phase.INTRO, int(round(intro_seconds * fps)))]
    for index in range(n_items):
        segments.append(Segment(Phase.ENTRANCE, entrance_frames, index))
        segments.append(Segment(Phase.HOLD, hold, index))
    segments.append(Segment(Phase.OUTRO, int(round(outro_seconds * fps))))
    return segments


class CancellationToken:
    """Cooperative cancel flag checked by the scheduler between frames."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled("Generation cancelled")


class OfflinePacer:
    """Frames are timed by their index only; never waits."""

    realtime = False

    def wait(self, timestamp: float) -> None:
        return None


class RealTimePacer:
    """Sleeps until each frame's presentation time is due on the wall clock."""

    realtime = True

    def __init__(self, clock: Callable[[], float] = time.monotonic, sleep: Callable[[float], None] = time.sleep):
        self.clock = clock
        self.sleep = sleep
        self._start = None

    def wait(self, timestamp: float) -> None:
        now = self.clock()
        if self._start is None:
            self._start = now - timestamp
        delay = self._start + timestamp - now
        if delay > 0:
            self.sleep(delay)


def make_pacer(pacing: str):
    return RealTimePacer() if pacing == 'realtime' else OfflinePacer()


PhaseCallback = Callable[[Phase, Optional[int], int], None]


class SlideshowScheduler:
    """Drives the renderers and the capture session through the timeline."""

    def __init__(self, surface, session, settings, fonts, pacer=None,
                 cancel: Optional[CancellationToken] = None):
        self.surface = surface
        self.session = session
        self.settings = settings
        self.palette = settings.palette
        self.fonts = fonts
        self.pacer = pacer or make_pacer(settings.pacing)
        self.cancel = cancel or CancellationToken()
        self.phase = Phase.IDLE
        self.frames_written = 0

    def _timestamp(self) -> float:
        return self.frames_written / self.settings.fps

    def _emit(self, repeat: int = 1) -> None:
        """Capture the current surface ``repeat`` times, checking for cancellation."""
        chunk = 1 if self.pacer.realtime else STATIC_CHUNK_FRAMES
        remaining = repeat
        while remaining > 0:
            self.cancel.raise_if_cancelled()
            n = min(chunk, remaining)
            self.session.capture(n)
            self.frames_written += n
            remaining -= n
            self.pacer.wait(self._timestamp())

    def _draw(self, render, *args) -> None:
        try:
            render(self.surface, *args)
        except (OSError, ValueError, MemoryError) as e:
            raise RenderError(f"Unable to draw frame at {self._timestamp():.2f}s: {e}") from e

    def _enter(self, phase: Phase, item_index: Optional[int], n_items: int,
               on_phase: Optional[PhaseCallback]) -> None:
        self.phase = phase
        logger.debug("Phase %s (item %s) at frame %d", phase.value, item_index, self.frames_written)
        if on_phase is not None:
            on_phase(phase, item_index, n_items)

    def run(self, items: Sequence[CatalogItem], bitmaps: Sequence, config: VideoConfig,
            texts: SlideTexts, on_phase: Optional[PhaseCallback] = None) -> int:
        """Render the whole timeline; return the number of frames written."""
        if len(items) != len(bitmaps):
            raise ValueError("items and bitmaps must have the same length")
        settings = self.settings
        animation = get_animation(config.animation)
        timeline = build_timeline(len(items), config.product_duration, settings.fps,
                                  settings.entrance_frames, settings.intro_seconds, settings.outro_seconds)
        n_items = len(items)
        prepared = {}

        for segment in timeline:
            self._enter(segment.phase, segment.item_index, n_items, on_phase)
            if segment.phase == Phase.INTRO:
                self._draw(render_intro, texts, self.palette, self.fonts)
                self._emit(segment.frames)
            elif segment.phase == Phase.OUTRO:
                self._draw(render_outro, texts, self.palette, self.fonts)
                self._emit(segment.frames)
            else:
                index = segment.item_index
                item = items[index]
                if index not in prepared:
                    prepared = {index: prepare_bitmap(bitmaps[index], self.surface.width, self.surface.height)}
                bitmap = prepared[index]
                if segment.phase == Phase.ENTRANCE:
                    for frame in range(segment.frames):
                        self._draw(render_slide, item, bitmap, frame / segment.frames, animation,
                                   config, self.palette, self.fonts)
                        self._emit(1)
                else:
                    self._draw(render_slide, item, bitmap, 1.0, animation, config, self.palette, self.fonts)
                    self._emit(segment.frames)

        self._enter(Phase.DONE, None, n_items, on_phase)
        return self.frames_written
