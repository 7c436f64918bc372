"""Capture/encode session.

Samples a rendering surface frame by frame and streams the frames into
moviepy's ffmpeg writer. Frames carry their presentation time implicitly
(``frame_index / fps``), so the encoded timing does not depend on how fast
the renderer runs. On ``stop()`` the encoded file is read back in chunks,
which are concatenated into the final payload.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Callable, List, Optional

from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter

from slideshow_generator.models import EncodedVideo
from slideshow_generator.services.errors import EncodingError
from .codecs import ENCODER_SPECS, EncoderSpec, extension_for

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class CaptureSession:
    """Streams surface snapshots into an encoded video file.

    Args:
        mime_type: negotiated codec identifier
        encoder: ffmpeg encoder name; defaults to the first candidate of the
            identifier's ``EncoderSpec``
        on_chunk: optional callback receiving each encoded chunk in order
    """

    def __init__(self, mime_type: str, encoder: Optional[str] = None,
                 on_chunk: Optional[Callable[[bytes], None]] = None, preset: str = 'medium'):
        self.mime_type = mime_type
        self.spec = ENCODER_SPECS.get(mime_type) or EncoderSpec(("libx264",), extension_for(mime_type))
        self.encoder = encoder or self.spec.encoders[0]
        self.on_chunk = on_chunk
        self.preset = preset
        self.frame_count = 0
        self.fps = None
        self._surface = None
        self._writer = None
        self._path = None
        self._chunks: List[bytes] = []

    @property
    def started(self) -> bool:
        return self._writer is not None

    def start(self, surface, fps: int) -> None:
        """Open the encoder on ``surface``; must happen before any frame is drawn."""
        if self.started:
            raise EncodingError("Capture session already started")
        if surface.width % 2 or surface.height % 2:
            raise EncodingError(f"Surface size must be even, got {surface.width}x{surface.height}")
        fd, self._path = tempfile.mkstemp(prefix="slideshow_", suffix=f".{self.spec.extension}")
        os.close(fd)
        params = list(self.spec.ffmpeg_params) + ["-pix_fmt", self.spec.pixel_format]
        try:
            self._writer = FFMPEG_VideoWriter(
                self._path,
                (surface.width, surface.height),
                fps,
                codec=self.encoder,
                preset=self.preset,
                ffmpeg_params=params,
            )
        except (OSError, IOError) as e:
            self._cleanup()
            logger.error("Unable to start encoder %s: %s", self.encoder, e)
            raise EncodingError(f"Unable to start video encoder ({self.encoder}): {e}") from e
        self._surface = surface
        self.fps = fps
        self.frame_count = 0
        self._chunks = []
        logger.info("Capture started: %s via %s at %d fps", self.mime_type, self.encoder, fps)

    def capture(self, repeat: int = 1) -> None:
        """Write the surface's current pixels as the next ``repeat`` frames."""
        if not self.started:
            raise EncodingError("Capture session not started")
        if repeat <= 0:
            return
        frame = self._surface.to_array()
        try:
            for _ in range(repeat):
                self._writer.write_frame(frame)
        except (OSError, IOError) as e:
            raise EncodingError(f"Encoder stopped accepting frames: {e}") from e
        self.frame_count += repeat

    def _emit(self, chunk: bytes) -> None:
        self._chunks.append(chunk)
        if self.on_chunk is not None:
            self.on_chunk(chunk)

    def stop(self) -> EncodedVideo:
        """Finalize the stream and return the concatenated payload."""
        if not self.started:
            raise EncodingError("Capture session not started")
        try:
            self._writer.close()
            self._writer = None
            if self.frame_count == 0:
                raise EncodingError("No frames were captured")
            with open(self._path, 'rb') as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b''):
                    self._emit(chunk)
        except OSError as e:
            raise EncodingError(f"Unable to finalize video: {e}") from e
        finally:
            self._cleanup()

        data = b''.join(self._chunks)
        if not data:
            raise EncodingError("Encoder produced no data")
        logger.info("Capture stopped: %d frames, %d bytes", self.frame_count, len(data))
        return EncodedVideo(data=data, mime_type=self.mime_type, frame_count=self.frame_count)

    def abort(self) -> None:
        """Discard the session (error or cancellation path)."""
        if self._writer is not None:
            try:
                self._writer.close()
            except OSError as e:
                logger.debug("Ignoring encoder close error on abort: %s", e)
            self._writer = None
        self._chunks = []
        self._cleanup()

    def _cleanup(self) -> None:
        if self._path and os.path.exists(self._path):
            os.unlink(self._path)
        self._path = None
