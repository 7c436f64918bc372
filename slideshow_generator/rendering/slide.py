"""
Product slide renderer

Draws one frame of a product slide on a ``Surface``: background, floral
motifs, the product bitmap under the animation transform, then the title and
price block. Holds no state between calls.
"""
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFilter

from slideshow_generator.core.selection import format_discount, format_price
from slideshow_generator.models import CatalogItem, VideoConfig, VisualParams
from .text_layout import draw_lines, text_width, wrap_text

# Image region: 80% of the width, 65% of the height, starting at 15% from the top
IMAGE_AREA_WIDTH = 0.8
IMAGE_AREA_HEIGHT = 0.65
IMAGE_AREA_TOP = 0.15
IMAGE_CORNER_RADIUS = 12

TITLE_FONT_SIZE = 64
TITLE_LINE_HEIGHT = 70
TITLE_MAX_LINES = 2
PRICE_FONT_SIZE = 48
ORIGINAL_PRICE_FONT_SIZE = 36
BADGE_RADIUS = 35
BADGE_MARGIN = 50

MOTIF_ALPHA = 0.25


@dataclass(frozen=True)
class PriceLabels:
    """Texts of the price block; ``original``/``saved``/``badge`` only when discounted."""

    current: str
    original: Optional[str] = None
    saved: Optional[str] = None
    badge: Optional[str] = None


def price_labels(item: CatalogItem) -> PriceLabels:
    if item.has_discount:
        return PriceLabels(
            current=format_price(item.discounted_price),
            original=format_price(item.price),
            saved=f"Save {format_price(item.saved_amount)}",
            badge=format_discount(item.discount),
        )
    return PriceLabels(current=format_price(item.price))


def motif_positions(width: int, height: int) -> List[Tuple[float, float, float, float]]:
    """``(x, y, size, rotation)`` of the four corner silhouettes."""
    return [
        (120, 180, 45, 0),
        (width - 120, height - 200, 50, math.pi / 4),
        (80, height - 300, 40, -math.pi / 6),
        (width - 80, 250, 35, math.pi / 3),
    ]


def _quad_bezier(p0, p1, p2, steps=8):
    pts = []
    for i in range(1, steps + 1):
        t = i / steps
        x = (1 - t) ** 2 * p0[0] + 2 * (1 - t) * t * p1[0] + t * t * p2[0]
        y = (1 - t) ** 2 * p0[1] + 2 * (1 - t) * t * p1[1] + t * t * p2[1]
        pts.append((x, y))
    return pts


@lru_cache(maxsize=1)
def _unit_petal() -> Tuple[Tuple[float, float], ...]:
    """Outline of one petal for size 1, pointing up."""
    segments = [
        ((0, -1.4), (0.6, -1.1), (0.8, -0.4)),
        ((0.8, -0.4), (0.9, 0.1), (0.5, 0.7)),
        ((0.5, 0.7), (0.2, 0.9), (0, 0.5)),
        ((0, 0.5), (-0.2, 0.9), (-0.5, 0.7)),
        ((-0.5, 0.7), (-0.9, 0.1), (-0.8, -0.4)),
        ((-0.8, -0.4), (-0.6, -1.1), (0, -1.4)),
    ]
    outline = [(0.0, -1.4)]
    for p0, p1, p2 in segments:
        outline.extend(_quad_bezier(p0, p1, p2))
    return tuple(outline)


def draw_floral_silhouette(draw, x, y, size, rotation, color, center_color, alpha):
    """Eight petals around a round center, rotated by ``rotation`` radians."""
    for i in range(8):
        angle = rotation + i * math.pi * 2 / 8
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        points = [(x + (px * cos_a - py * sin_a) * size, y + (px * sin_a + py * cos_a) * size)
                  for px, py in _unit_petal()]
        draw.polygon(points, fill=tuple(color) + (alpha,))
    r = size * 0.3
    draw.ellipse([(x - r, y - r), (x + r, y + r)], fill=tuple(center_color) + (alpha,))


def draw_motifs(surface, opacity: float, palette) -> None:
    alpha = int(round(255 * MOTIF_ALPHA * max(0.0, min(1.0, opacity))))
    if alpha <= 0:
        return
    overlay = Image.new('RGBA', surface.size, (0, 0, 0, 0))
    odraw = ImageDraw.Draw(overlay)
    for x, y, size, rotation in motif_positions(surface.width, surface.height):
        draw_floral_silhouette(odraw, x, y, size, rotation, palette.motif, palette.motif_center, alpha)
    surface.image.paste(overlay, (0, 0), overlay)


def image_area(width: int, height: int, offset_y: float = 0.0) -> Tuple[float, float, float, float]:
    """``(x, y, w, h)`` of the product image region; ``offset_y`` is a height fraction."""
    area_w = width * IMAGE_AREA_WIDTH
    area_h = height * IMAGE_AREA_HEIGHT
    return (width - area_w) / 2, height * IMAGE_AREA_TOP + offset_y * height, area_w, area_h


def fit_size(image_size, area_w: float, area_h: float, scale: float = 1.0) -> Tuple[int, int]:
    """Size of an image fit into the area preserving its aspect ratio, times ``scale``."""
    iw, ih = image_size
    image_aspect = iw / ih
    if image_aspect > area_w / area_h:
        draw_w = area_w * scale
        draw_h = draw_w / image_aspect
    else:
        draw_h = area_h * scale
        draw_w = draw_h * image_aspect
    return max(1, int(round(draw_w))), max(1, int(round(draw_h)))


def prepare_bitmap(bitmap: Image.Image, width: int, height: int) -> Image.Image:
    """Downscale ``bitmap`` once to its full-size fit so per-frame resizes stay cheap."""
    _, _, area_w, area_h = image_area(width, height)
    target = fit_size(bitmap.size, area_w, area_h)
    img = bitmap if bitmap.mode == 'RGBA' else bitmap.convert('RGBA')
    if img.size[0] > target[0] or img.size[1] > target[1]:
        img = img.resize(target, Image.Resampling.LANCZOS)
    return img


def _rounded_mask(size, radius: int) -> Image.Image:
    mask = Image.new('L', size, 0)
    ImageDraw.Draw(mask).rounded_rectangle([(0, 0), (size[0] - 1, size[1] - 1)], radius=radius, fill=255)
    return mask


def draw_product_image(surface, bitmap: Image.Image, params: VisualParams) -> None:
    """Paste the bitmap fit into the image region under scale/rotation/opacity."""
    opacity = max(0.0, min(1.0, params.image_opacity))
    if opacity <= 0:
        return
    area_x, area_y, area_w, area_h = image_area(surface.width, surface.height, params.image_offset_y)
    size = fit_size(bitmap.size, area_w, area_h, params.image_scale)
    img = bitmap.resize(size, Image.Resampling.BILINEAR) if bitmap.size != size else bitmap.copy()
    if img.mode != 'RGBA':
        img = img.convert('RGBA')

    alpha = ImageChops.multiply(img.getchannel('A'), _rounded_mask(size, IMAGE_CORNER_RADIUS))
    if opacity < 1:
        alpha = alpha.point(lambda a: int(a * opacity))
    img.putalpha(alpha)

    if params.image_rotation:
        # PIL rotates counter-clockwise
        img = img.rotate(-math.degrees(params.image_rotation), resample=Image.Resampling.BICUBIC, expand=True)

    center_x = area_x + area_w / 2
    center_y = area_y + area_h / 2
    x = int(round(center_x - img.width / 2))
    y = int(round(center_y - img.height / 2))

    # Soft drop shadow, fading in with the image
    blur = 20 * opacity
    shadow_alpha = img.getchannel('A').point(lambda a: int(a * 0.08))
    shadow = Image.new('RGBA', img.size, (0, 0, 0, 0))
    shadow.putalpha(shadow_alpha)
    pad = int(blur * 2)
    if pad:
        padded = Image.new('RGBA', (img.width + pad * 2, img.height + pad * 2), (0, 0, 0, 0))
        padded.paste(shadow, (pad, pad))
        shadow = padded.filter(ImageFilter.GaussianBlur(blur))
    surface.composite(shadow, (x - pad, y - pad + int(8 * opacity)))

    surface.composite(img, (x, y))


def draw_price_block(draw, item: CatalogItem, center_x: float, y: float, width: int, height: int,
                     palette, fonts, alpha: int) -> None:
    labels = price_labels(item)
    accent = tuple(palette.accent) + (alpha,)
    muted = tuple(palette.muted) + (alpha,)
    price_font = fonts.sans(PRICE_FONT_SIZE, bold=True)
    draw.text((center_x, y), labels.current, font=price_font, fill=accent, anchor='ms')
    if labels.original is None:
        return

    # Struck original price and saved amount side by side on the next line
    small_font = fonts.sans(ORIGINAL_PRICE_FONT_SIZE)
    gap = 24
    original_w = text_width(small_font, labels.original)
    saved_w = text_width(small_font, labels.saved)
    left = center_x - (original_w + gap + saved_w) / 2
    row_y = y + 55
    draw.text((left, row_y), labels.original, font=small_font, fill=muted, anchor='ls')
    strike_y = row_y - ORIGINAL_PRICE_FONT_SIZE * 0.3
    draw.line([(left, strike_y), (left + original_w, strike_y)], fill=muted, width=2)
    draw.text((left + original_w + gap, row_y), labels.saved, font=small_font, fill=accent, anchor='ls')

    # Discount badge in the bottom-right corner
    bx, by = width - BADGE_MARGIN, height - BADGE_MARGIN
    draw.ellipse([(bx - BADGE_RADIUS, by - BADGE_RADIUS), (bx + BADGE_RADIUS, by + BADGE_RADIUS)], fill=accent)
    draw.text((bx, by), labels.badge, font=fonts.sans(22, bold=True),
              fill=tuple(palette.badge_text) + (alpha,), anchor='mm')


def draw_product_text(surface, item: CatalogItem, params: VisualParams, config: VideoConfig,
                      palette, fonts) -> int:
    """Draw title and price below the image region; return the title line count."""
    opacity = max(0.0, min(1.0, params.text_opacity))
    if opacity <= 0 or not (config.show_name or config.show_price):
        return 0
    alpha = int(round(255 * opacity))
    overlay = Image.new('RGBA', surface.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    width, height = surface.size
    _, area_y, _, area_h = image_area(width, height)
    text_y = area_y + area_h + 60 + params.text_offset_y
    title_lines = 0

    if config.show_name:
        font = fonts.serif(TITLE_FONT_SIZE)
        lines = wrap_text(item.title, width * 0.8, font)[:TITLE_MAX_LINES]
        title_lines = draw_lines(draw, lines, width / 2, text_y, TITLE_LINE_HEIGHT, font,
                                 tuple(palette.title) + (alpha,))
        text_y += title_lines * TITLE_LINE_HEIGHT + 30

    if config.show_price:
        draw_price_block(draw, item, width / 2, text_y, width, height, palette, fonts, alpha)

    surface.composite(overlay)
    return title_lines


def render_slide(surface, item: CatalogItem, bitmap: Image.Image, progress: float,
                 animation: Callable[[float], VisualParams], config: VideoConfig, palette, fonts) -> VisualParams:
    """Draw one frame of ``item``'s slide at ``progress`` onto ``surface``.

    ``animation`` is the variant picked once per run (see ``core.animation``).
    Returns the visual parameters used for the frame.
    """
    params = animation(progress)
    surface.fill(palette.background)
    draw_motifs(surface, params.image_opacity, palette)
    draw_product_image(surface, bitmap, params)
    draw_product_text(surface, item, params, config, palette, fonts)
    return params
