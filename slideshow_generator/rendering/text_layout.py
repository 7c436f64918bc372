"""Multi-line text layout.

Greedy word wrap bounded by a pixel width, plus helpers to measure and draw
the resulting lines centered on a column, one baseline per line.
"""
from __future__ import annotations

from typing import List, Sequence


def text_width(font, text: str) -> float:
    """Rendered width of ``text`` in pixels."""
    return font.getlength(text)


def wrap_text(text: str, max_width: float, font) -> List[str]:
    """Split ``text`` into lines no wider than ``max_width`` for ``font``.

    Words are accumulated onto the current line while it fits; the word that
    overflows starts the next line. A single word wider than ``max_width``
    gets a line of its own, so non-empty input always yields at least one
    line and no word is ever dropped.
    """
    words = (text or "").split()
    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and text_width(font, candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def measured_height(lines: Sequence[str], line_height: float) -> int:
    """Vertical space taken by ``lines`` at a constant ``line_height``."""
    return int(round(len(lines) * line_height))


def draw_lines(draw, lines: Sequence[str], center_x: float, baseline_y: float,
               line_height: float, font, fill) -> int:
    """Draw ``lines`` centered on ``center_x``, the first on ``baseline_y``.

    Returns the number of lines drawn so callers can stack the next block.
    """
    for index, line in enumerate(lines):
        draw.text((center_x, baseline_y + index * line_height), line, font=font, fill=fill, anchor='ms')
    return len(lines)


def draw_wrapped(draw, text: str, center_x: float, baseline_y: float, max_width: float,
                 line_height: float, font, fill, max_lines: int = 0) -> int:
    """Wrap and draw ``text``; ``max_lines`` > 0 silently drops overflow lines."""
    lines = wrap_text(text, max_width, font)
    if max_lines > 0:
        lines = lines[:max_lines]
    return draw_lines(draw, lines, center_x, baseline_y, line_height, font, fill)
