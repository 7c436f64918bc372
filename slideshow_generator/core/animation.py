"""Easing curves and the entrance animation variants.

Each variant is a pure function of progress returning ``VisualParams``. The
variant is looked up once per run with ``get_animation`` instead of being
branched on every frame.
"""
from __future__ import annotations

import math
from typing import Callable, Dict

from slideshow_generator.models import VisualParams

Animation = Callable[[float], VisualParams]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def ease_in_out_cubic(t: float) -> float:
    """Symmetric cubic ease-in-out on [0, 1]."""
    if t < 0.5:
        return 4 * t * t * t
    return 1 - math.pow(-2 * t + 2, 3) / 2


def ease_out_elastic(t: float) -> float:
    """Damped oscillation ease-out: overshoots slightly then settles on 1."""
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return math.pow(2, -10 * t) * math.sin((t * 10 - 0.75) * c4) + 1


def _delayed(eased: float, delay: float) -> float:
    """Opacity that starts once ``eased`` passes ``delay`` and reaches 1 with it."""
    return clamp((eased - delay) / (1 - delay))


def fade(progress: float) -> VisualParams:
    eased = ease_in_out_cubic(clamp(progress))
    return VisualParams(image_opacity=eased, text_opacity=eased)


def zoom(progress: float) -> VisualParams:
    eased = ease_in_out_cubic(clamp(progress))
    return VisualParams(
        image_scale=1 - 0.7 * (1 - eased),  # 0.3 -> 1
        image_opacity=eased,
        # text shows up after the image
        text_opacity=_delayed(eased, 0.3),
    )


def slide(progress: float) -> VisualParams:
    eased = ease_in_out_cubic(clamp(progress))
    return VisualParams(
        image_opacity=eased,
        image_offset_y=(1 - eased) * 0.5,
        text_opacity=eased,
        text_offset_y=(1 - eased) * 100,
    )


def rotate(progress: float) -> VisualParams:
    p = clamp(progress)
    eased = ease_in_out_cubic(p)
    return VisualParams(
        image_scale=1 - 0.5 * (1 - eased),  # 0.5 -> 1
        image_opacity=eased,
        image_rotation=(1 - ease_out_elastic(p)) * 2 * math.pi,
        text_opacity=_delayed(eased, 0.4),
    )


ANIMATIONS: Dict[str, Animation] = {
    'fade': fade,
    'zoom': zoom,
    'slide': slide,
    'rotate': rotate,
}


def get_animation(kind: str) -> Animation:
    """Return the animation function for ``kind``; raise ``ValueError`` if unknown."""
    try:
        return ANIMATIONS[kind]
    except KeyError:
        raise ValueError(f"Unknown animation kind: {kind}") from None
