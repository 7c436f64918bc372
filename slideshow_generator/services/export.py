"""Download and share actions for generated videos.

Thin I/O wrappers around a ``GeneratedVideo``; the engine itself never
touches the filesystem for its output.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from slideshow_generator.models import GeneratedVideo

logger = logging.getLogger(__name__)

ShareFn = Callable[[bytes, str, str], None]   # (data, mime_type, file_name)
CopyFn = Callable[[str], None]


def video_file_name(video: GeneratedVideo) -> str:
    return f"{video.id}.{video.extension}"


def save_video(video: GeneratedVideo, output_dir: str) -> str:
    """Write the video bytes to ``output_dir`` and return the file path."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, video_file_name(video))
    with open(path, 'wb') as f:
        f.write(video.data)
    logger.info("Saved video %s (%d bytes)", path, video.byte_size)
    return path


def share_video(video: GeneratedVideo, share: Optional[ShareFn] = None,
                copy: Optional[CopyFn] = None, reference: Optional[str] = None) -> str:
    """Hand the video to ``share``; fall back to copying a reference string.

    Returns ``"shared"`` or ``"copied"``. ``reference`` defaults to the video id.
    """
    if share is not None:
        try:
            share(video.data, video.mime_type, video_file_name(video))
            return "shared"
        except Exception as e:
            logger.warning("Sharing failed, copying reference instead: %s", e)
    ref = reference or video.id
    if copy is not None:
        copy(ref)
    else:
        logger.info("Video reference: %s", ref)
    return "copied"
