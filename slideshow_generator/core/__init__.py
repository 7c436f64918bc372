"""
Core utilities and domain helpers for the slideshow generator.

This package hosts pure, side-effect-free logic (easing, animation variants,
item selection, formatting) kept apart from rendering and I/O so it can be
unit tested without Pillow or ffmpeg.
"""

__all__ = [
    "ease_in_out_cubic",
    "ease_out_elastic",
    "get_animation",
    "filter_items",
    "list_categories",
    "format_price",
    "format_discount",
    "format_seconds",
    "format_file_size",
]

from .animation import ease_in_out_cubic, ease_out_elastic, get_animation
from .selection import filter_items, list_categories, format_price, format_discount
from .timeutils import format_seconds, format_file_size
