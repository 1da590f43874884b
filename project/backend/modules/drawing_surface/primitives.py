"""
Drawing primitives shared by the slide renderer and directive handlers.
"""
from functools import lru_cache
from typing import List, Tuple, Union

from PIL import ImageDraw, ImageFont

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@lru_cache(maxsize=None)
def load_font(size: int, bold: bool = False) -> Font:
    """
    Load a TrueType font at size, falling back to Pillow's bundled font.

    Args:
        size: Font size in canvas units
        bold: Use the bold face when available
    """
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def lighten_color(hex_color: str, factor: float) -> str:
    """Blend a #rrggbb color towards white by factor (0..1)."""
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)

    new_r = min(255, int(r + (255 - r) * factor))
    new_g = min(255, int(g + (255 - g) * factor))
    new_b = min(255, int(b + (255 - b) * factor))

    return f"#{new_r:02x}{new_g:02x}{new_b:02x}"


def text_size(draw: ImageDraw.ImageDraw, text: str, font: Font) -> Tuple[float, float]:
    """Width and height of text rendered with font."""
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def draw_centered_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    center_x: float,
    baseline_y: float,
    font: Font,
    fill: str
) -> None:
    """Draw text horizontally centered on center_x, sitting on baseline_y."""
    width, height = text_size(draw, text, font)
    draw.text((center_x - width / 2, baseline_y - height), text, font=font, fill=fill)


def wrap_lines(draw: ImageDraw.ImageDraw, text: str, font: Font, max_width: float) -> List[str]:
    """Greedy word wrap of text into lines no wider than max_width."""
    words = text.split()
    lines: List[str] = []
    line = ""
    for word in words:
        candidate = f"{line} {word}".strip()
        if line and draw.textlength(candidate, font=font) > max_width:
            lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


def draw_wrapped_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    center_x: float,
    y: float,
    max_width: float,
    line_height: float,
    font: Font,
    fill: str
) -> float:
    """
    Draw centered, word-wrapped text starting at baseline y.

    Returns:
        Baseline of the last line drawn
    """
    current_y = y
    for i, line in enumerate(wrap_lines(draw, text, font, max_width)):
        if i > 0:
            current_y += line_height
        draw_centered_text(draw, line, center_x, current_y, font, fill)
    return current_y
