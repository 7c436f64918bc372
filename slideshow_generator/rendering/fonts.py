"""Font lookup with system fallbacks."""
from __future__ import annotations

import functools
import logging
from typing import Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Tried in order; bare file names are looked up by Pillow in the system font dirs
FONT_CANDIDATES = {
    ('serif', False): ("DejaVuSerif.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
                       "/System/Library/Fonts/Supplemental/Georgia.ttf", "georgia.ttf", "times.ttf"),
    ('serif', True): ("DejaVuSerif-Bold.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Bold.ttf",
                      "/System/Library/Fonts/Supplemental/Georgia Bold.ttf", "georgiab.ttf", "timesbd.ttf"),
    ('sans', False): ("DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
                      "/System/Library/Fonts/Helvetica.ttc", "arial.ttf"),
    ('sans', True): ("DejaVuSans-Bold.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
                     "/System/Library/Fonts/Helvetica.ttc", "arialbd.ttf"),
}


@functools.lru_cache(maxsize=64)
def load_font(size: int, family: str = 'sans', bold: bool = False, path: Optional[str] = None):
    """Return a TrueType font of ``size`` px.

    A configured ``path`` wins; then the platform candidates for ``family``;
    finally Pillow's bundled scalable default font.
    """
    candidates = ((path,) if path else ()) + FONT_CANDIDATES.get((family, bold), ())
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    logger.warning("No TrueType font found for %s (bold=%s), using Pillow default", family, bold)
    return ImageFont.load_default(size=size)


class FontSet:
    """Fonts used by one render run, resolved once."""

    def __init__(self, serif_path: Optional[str] = None, sans_path: Optional[str] = None):
        self.serif_path = serif_path
        self.sans_path = sans_path

    def serif(self, size: int, bold: bool = False):
        return load_font(size, 'serif', bold, self.serif_path)

    def sans(self, size: int, bold: bool = False):
        return load_font(size, 'sans', bold, self.sans_path)
