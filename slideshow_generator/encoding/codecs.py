"""Codec negotiation.

Picks the first supported container/codec from an ordered preference list.
Identifiers use the mime-type notation (``video/mp4;codecs=h264``) so the
result can be used as is for the artifact's content type; each identifier is
mapped to the ffmpeg encoder and options that produce it.
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

MP4_PREFERENCES = (
    "video/mp4;codecs=h264",
    "video/mp4;codecs=avc1.42E01E",
    "video/mp4",
)
WEBM_PREFERENCES = (
    "video/webm;codecs=vp9",
    "video/webm;codecs=vp8",
    "video/webm",
)
# Widely playable MP4 first, WebM as the looser fallback family
DEFAULT_PREFERENCES = MP4_PREFERENCES + WEBM_PREFERENCES
DEFAULT_CODEC = "video/mp4"


@dataclass(frozen=True)
class EncoderSpec:
    """How ffmpeg produces a given mime identifier."""

    encoders: Tuple[str, ...]        # candidate ffmpeg encoders, in order
    extension: str
    ffmpeg_params: Tuple[str, ...] = ()
    pixel_format: str = "yuv420p"


ENCODER_SPECS = {
    "video/mp4;codecs=h264": EncoderSpec(("libx264",), "mp4", ("-movflags", "+faststart")),
    "video/mp4;codecs=avc1.42E01E": EncoderSpec(
        ("libx264",), "mp4", ("-profile:v", "baseline", "-level", "3.0", "-movflags", "+faststart")
    ),
    "video/mp4": EncoderSpec(("libx264", "mpeg4"), "mp4", ("-movflags", "+faststart")),
    "video/webm;codecs=vp9": EncoderSpec(("libvpx-vp9",), "webm", ("-b:v", "0", "-crf", "32")),
    "video/webm;codecs=vp8": EncoderSpec(("libvpx",), "webm", ("-b:v", "4M")),
    "video/webm": EncoderSpec(("libvpx", "libvpx-vp9"), "webm", ("-b:v", "4M")),
}


def extension_for(mime_type: str) -> str:
    """Conventional file extension for a negotiated identifier."""
    spec = ENCODER_SPECS.get(mime_type)
    if spec:
        return spec.extension
    return "mp4" if "mp4" in mime_type else "webm"


def negotiate(preferred: Iterable[str], is_supported: Callable[[str], bool]) -> str:
    """Return the first identifier of ``preferred`` accepted by ``is_supported``.

    Never raises: when nothing is supported the best-guess default is
    returned and the failure is left to the capture session.
    """
    for codec in preferred:
        if is_supported(codec):
            logger.info("Using video codec %s", codec)
            return codec
    logger.error("No supported video codec found, falling back to %s", DEFAULT_CODEC)
    return DEFAULT_CODEC


def _default_ffmpeg_exe() -> str:
    from imageio_ffmpeg import get_ffmpeg_exe

    return get_ffmpeg_exe()


class FfmpegCapabilities:
    """Encoder capability probe backed by the ffmpeg binary moviepy uses.

    The encoder list is read once per instance. ``list_encoders`` can be
    injected to avoid spawning ffmpeg (tests, other platforms).
    """

    def __init__(self, list_encoders: Optional[Callable[[], Iterable[str]]] = None):
        self._list_encoders = list_encoders or self._probe_ffmpeg
        self._encoders: Optional[FrozenSet[str]] = None

    @staticmethod
    def _probe_ffmpeg() -> Iterable[str]:
        try:
            exe = _default_ffmpeg_exe()
            out = subprocess.run(
                [exe, "-hide_banner", "-encoders"],
                capture_output=True, text=True, timeout=15, check=True,
            ).stdout
        except (OSError, subprocess.SubprocessError, RuntimeError) as e:
            logger.error("Unable to query ffmpeg encoders: %s", e)
            return []
        return parse_encoder_list(out)

    @property
    def encoders(self) -> FrozenSet[str]:
        if self._encoders is None:
            self._encoders = frozenset(self._list_encoders())
            logger.debug("Available encoders: %d", len(self._encoders))
        return self._encoders

    def encoder_for(self, mime_type: str) -> Optional[str]:
        """First available ffmpeg encoder for ``mime_type``, or None."""
        spec = ENCODER_SPECS.get(mime_type)
        if spec is None:
            return None
        for name in spec.encoders:
            if name in self.encoders:
                return name
        return None

    def is_supported(self, mime_type: str) -> bool:
        return self.encoder_for(mime_type) is not None


def parse_encoder_list(output: str) -> list:
    """Extract encoder names from ``ffmpeg -encoders`` output.

    Lines after the ``------`` separator look like
    ``" V....D libx264   libx264 H.264 / AVC ..."``; only video encoders
    (flag column starting with ``V``) are kept.
    """
    names = []
    started = False
    for line in output.splitlines():
        stripped = line.strip()
        if not started:
            started = stripped.startswith("------")
            continue
        parts = stripped.split()
        if len(parts) >= 2 and parts[0].startswith("V"):
            names.append(parts[1])
    return names
