"""
Product slideshow video generator

Renders a curated list of catalog items into an animated slideshow video:
intro card, one animated slide per product, outro card.
"""

__version__ = "0.1.0"

__all__ = [
    "SlideshowGenerator",
    "CatalogItem",
    "VideoConfig",
    "SlideTexts",
    "GeneratedVideo",
]

from .generator import SlideshowGenerator
from .models import CatalogItem, VideoConfig, SlideTexts, GeneratedVideo
