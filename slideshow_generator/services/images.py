"""Product image acquisition.

Resolves each item's image reference, downloads and decodes it. Any failure
is recovered locally by synthesizing a placeholder bitmap, so callers always
get an image and never an error for a single item.
"""
from __future__ import annotations

import io
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from PIL import Image, ImageDraw, UnidentifiedImageError

from slideshow_generator.core.selection import format_price
from slideshow_generator.models import CatalogItem
from slideshow_generator.rendering.fonts import load_font
from slideshow_generator.rendering.surface import Surface
from .assets import fetch_image_bytes, resolve_image_url
from .errors import AssetDownloadError

logger = logging.getLogger(__name__)

PLACEHOLDER_SIZE = (400, 400)
PLACEHOLDER_TITLE_CHARS = 20
PLACEHOLDER_GRADIENT = ((245, 242, 237), (229, 224, 216))
PLACEHOLDER_BORDER = (209, 199, 189)
PLACEHOLDER_TEXT = (122, 92, 74)
PLACEHOLDER_PRICE = (153, 153, 153)


def placeholder_caption(item: CatalogItem):
    """Return ``(title, price)`` texts drawn on the placeholder; price may be None."""
    title = item.title[:PLACEHOLDER_TITLE_CHARS]
    price = format_price(item.price) if item.price else None
    return title, price


def _diagonal_gradient(size, start, end) -> Image.Image:
    """Top-left to bottom-right linear gradient between two RGB colors."""
    w, h = size
    # 2x2 image stretched with bilinear interpolation: corners carry the blend
    mid = tuple((a + b) // 2 for a, b in zip(start, end))
    seed = Image.new('RGB', (2, 2))
    seed.putdata([start, mid, mid, end])
    return seed.resize((w, h), Image.Resampling.BILINEAR)


def _draw_pictogram(draw: ImageDraw.ImageDraw, cx: int, cy: int, size: int, color) -> None:
    """Generic "picture" glyph: a frame with a sun and two mountains."""
    half = size // 2
    left, top, right, bottom = cx - half, cy - int(half * 0.8), cx + half, cy + int(half * 0.8)
    draw.rounded_rectangle([(left, top), (right, bottom)], radius=6, outline=color, width=3)
    r = size // 10
    draw.ellipse([(left + size // 5 - r, top + size // 4 - r), (left + size // 5 + r, top + size // 4 + r)], fill=color)
    base = bottom - 4
    draw.polygon([(left + 4, base), (cx - size // 8, top + size // 3), (cx + size // 8, base)], fill=color)
    draw.polygon([(cx - size // 10, base), (cx + size // 5, top + size // 2), (right - 4, base)], fill=color)


def synthesize_placeholder(item: CatalogItem) -> Image.Image:
    """Draw a stand-in bitmap carrying the item's title and price.

    Uses a fresh surface of its own. Raises ``SurfaceError`` if the surface
    cannot be allocated.
    """
    width, height = PLACEHOLDER_SIZE
    surface = Surface(width, height, PLACEHOLDER_GRADIENT[0])
    surface.image.paste(_diagonal_gradient(PLACEHOLDER_SIZE, *PLACEHOLDER_GRADIENT), (0, 0))
    draw = surface.draw()

    # Thin border
    draw.rectangle([(1, 1), (width - 2, height - 2)], outline=PLACEHOLDER_BORDER, width=2)

    title, price = placeholder_caption(item)
    draw.text((width // 2, 180), title, font=load_font(24, 'sans', bold=True),
              fill=PLACEHOLDER_TEXT, anchor='ms')
    _draw_pictogram(draw, width // 2, 225, 60, PLACEHOLDER_TEXT)
    if price:
        draw.text((width // 2, 280), price, font=load_font(18, 'sans'), fill=PLACEHOLDER_PRICE, anchor='ms')
    return surface.image.convert('RGBA')


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGBA bitmap; raise ``AssetDownloadError`` if invalid."""
    if not data:
        raise AssetDownloadError("Empty image payload")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise AssetDownloadError(f"Unable to decode image: {e}") from e
    if img.width == 0 or img.height == 0:
        raise AssetDownloadError("Image has no pixels")
    return img.convert('RGBA')


class ImageAcquirer:
    """Fetches product bitmaps, falling back to synthesized placeholders."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10,
                 fetch: Callable[[str, float], bytes] = None, max_workers: int = 8):
        self.base_url = base_url
        self.timeout = timeout
        self.fetch = fetch or fetch_image_bytes
        self.max_workers = max_workers

    def acquire(self, reference: str, item: CatalogItem) -> Image.Image:
        """Return the decoded bitmap for ``reference`` or a placeholder for ``item``."""
        try:
            url = resolve_image_url(reference, self.base_url)
            bitmap = decode_image(self.fetch(url, self.timeout))
            logger.info("Image loaded: %s", item.title)
            return bitmap
        except Exception as e:
            # network, timeout and decode failures are all equivalent here
            logger.warning("Image unavailable for %s (%s), using placeholder", item.title, e)
            return synthesize_placeholder(item)

    def acquire_all(self, items: Sequence[CatalogItem],
                    on_progress: Optional[Callable[[int, int], None]] = None) -> List[Image.Image]:
        """Acquire every item's bitmap in parallel; results keep the input order."""
        items = list(items)
        total = len(items)
        results: List[Optional[Image.Image]] = [None] * total
        if not total:
            return []
        done = 0
        with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as pool:
            futures = {pool.submit(self.acquire, item.image_ref, item): idx for idx, item in enumerate(items)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                done += 1
                if on_progress is not None:
                    on_progress(done, total)
        return results
