"""Rendering layer.

Pure drawing code on top of Pillow: surfaces, fonts, text layout, product
slides and the intro/outro cards. Nothing here knows about timing or encoding.
"""

__all__ = [
    "Surface",
    "FontSet",
    "render_slide",
    "render_intro",
    "render_outro",
]

from .surface import Surface
from .fonts import FontSet
from .slide import render_slide
from .cards import render_intro, render_outro
