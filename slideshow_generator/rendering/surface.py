"""Raster drawing surfaces.

A ``Surface`` wraps a Pillow image that the renderers draw on and that the
capture session samples. Every caller gets its own surface: the placeholder
synthesis never shares the main render surface.
"""
from __future__ import annotations

import numpy as np
from PIL import Image, ImageDraw

from slideshow_generator.services.errors import SurfaceError


class Surface:
    """Mutable RGB canvas of a fixed size."""

    def __init__(self, width: int, height: int, background=(0, 0, 0), mode: str = 'RGB'):
        self.width = int(width)
        self.height = int(height)
        self.mode = mode
        try:
            self.image = Image.new(mode, (self.width, self.height), background)
        except (ValueError, MemoryError) as e:
            raise SurfaceError(f"Unable to allocate a {width}x{height} drawing surface: {e}") from e

    @property
    def size(self):
        return self.width, self.height

    def draw(self) -> ImageDraw.ImageDraw:
        return ImageDraw.Draw(self.image)

    def fill(self, color) -> None:
        self.draw().rectangle([(0, 0), (self.width, self.height)], fill=tuple(color))

    def composite(self, overlay: Image.Image, position=(0, 0)) -> None:
        """Alpha-composite an RGBA overlay onto the surface at ``position``."""
        if overlay.mode != 'RGBA':
            overlay = overlay.convert('RGBA')
        x, y = int(position[0]), int(position[1])
        self.image.paste(overlay, (x, y), overlay)

    def to_array(self) -> np.ndarray:
        """Current pixels as a ``(height, width, 3)`` uint8 array."""
        img = self.image if self.image.mode == 'RGB' else self.image.convert('RGB')
        return np.asarray(img, dtype=np.uint8)
