"""Static intro and outro cards."""
from slideshow_generator.models import SlideTexts
from .text_layout import draw_wrapped

TEXT_PADDING = 100


def render_intro(surface, texts: SlideTexts, palette, fonts) -> None:
    """Brand name, subtitle and description stacked around mid-height."""
    surface.fill(palette.background)
    draw = surface.draw()
    cx, cy = surface.width / 2, surface.height / 2
    max_width = surface.width - TEXT_PADDING * 2

    brand_y = cy - 40
    brand_lines = draw_wrapped(draw, texts.brand_name, cx, brand_y, max_width, 96,
                               fonts.serif(88), tuple(palette.title))
    subtitle_y = brand_y + max(brand_lines - 1, 0) * 96 + 60
    subtitle_lines = draw_wrapped(draw, texts.intro_subtitle, cx, subtitle_y, max_width, 60,
                                  fonts.serif(52), tuple(palette.accent))
    description_y = subtitle_y + max(subtitle_lines - 1, 0) * 60 + 50
    draw_wrapped(draw, texts.intro_description, cx, description_y, max_width, 44,
                 fonts.serif(36), tuple(palette.muted))


def render_outro(surface, texts: SlideTexts, palette, fonts) -> None:
    """Closing message, call to action and brand name, each block below the previous one."""
    surface.fill(palette.background)
    draw = surface.draw()
    cx, cy = surface.width / 2, surface.height / 2
    max_width = surface.width - TEXT_PADDING * 2

    message_y = cy - 60
    message_lines = draw_wrapped(draw, texts.outro_message, cx, message_y, max_width, 80,
                                 fonts.serif(72), tuple(palette.title))
    cta_y = message_y + message_lines * 80 + 40
    cta_lines = draw_wrapped(draw, texts.outro_call_to_action, cx, cta_y, max_width, 60,
                             fonts.serif(48), tuple(palette.accent))
    brand_y = cta_y + cta_lines * 60 + 40
    draw.text((cx, brand_y), texts.brand_name, font=fonts.sans(36), fill=tuple(palette.muted), anchor='ms')
