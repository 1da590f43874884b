"""
Built-in visual directives.

Each handler draws into the media area of a slide. Parameters come from
the scene's visual directive in order.
"""
from typing import Any, Sequence

from PIL import ImageDraw

from .config import COLORS, DIRECTIVE_FONT_SIZE
from .primitives import draw_centered_text, draw_wrapped_text, load_font, lighten_color, text_size
from .registry import MediaArea, register_directive

_PALETTE = [COLORS["secondary"], COLORS["accent1"], COLORS["accent2"], COLORS["accent3"], COLORS["primary"]]


@register_directive("bullet_list")
def draw_bullet_list(draw: ImageDraw.ImageDraw, area: MediaArea, *items: Any) -> None:
    """One bullet per parameter, top to bottom."""
    if not items:
        raise ValueError("bullet_list requires at least one item")
    font = load_font(DIRECTIVE_FONT_SIZE)
    row_height = min(area.height / len(items), 48)
    for i, item in enumerate(items):
        y = area.y + 30 + i * row_height
        cx = area.x + 40
        draw.ellipse((cx - 5, y - 5, cx + 5, y + 5), fill=_PALETTE[i % len(_PALETTE)])
        _, height = text_size(draw, str(item), font)
        draw.text((cx + 20, y - height / 2 - 2), str(item), font=font, fill=COLORS["text"])


@register_directive("bar_chart")
def draw_bar_chart(
    draw: ImageDraw.ImageDraw,
    area: MediaArea,
    labels: Sequence[Any],
    values: Sequence[float],
    title: str = ""
) -> None:
    """Vertical bar chart of values, one bar per label."""
    if len(labels) != len(values) or not values:
        raise ValueError("bar_chart requires equally sized, non-empty labels and values")
    peak = max(float(v) for v in values)
    if peak <= 0:
        raise ValueError("bar_chart requires at least one positive value")

    font = load_font(DIRECTIVE_FONT_SIZE - 4)
    top = area.y + (50 if title else 20)
    bottom = area.y + area.height - 40
    slot = area.width / len(values)
    bar_width = slot * 0.6

    if title:
        draw_centered_text(draw, str(title), area.center[0], area.y + 35, load_font(DIRECTIVE_FONT_SIZE, bold=True), COLORS["primary"])

    draw.line((area.x + 10, bottom, area.x + area.width - 10, bottom), fill=COLORS["text"], width=2)
    for i, (label, value) in enumerate(zip(labels, values)):
        cx = area.x + slot * i + slot / 2
        bar_top = bottom - (bottom - top) * (float(value) / peak)
        draw.rectangle(
            (cx - bar_width / 2, bar_top, cx + bar_width / 2, bottom),
            fill=_PALETTE[i % len(_PALETTE)],
            outline=COLORS["text"],
        )
        draw_centered_text(draw, str(label), cx, bottom + 22, font, COLORS["text"])
        draw_centered_text(draw, f"{value:g}" if isinstance(value, (int, float)) else str(value), cx, bar_top - 6, font, COLORS["text"])


@register_directive("process_flow")
def draw_process_flow(draw: ImageDraw.ImageDraw, area: MediaArea, *steps: Any) -> None:
    """Left-to-right boxes joined by arrows, one box per step."""
    if not steps:
        raise ValueError("process_flow requires at least one step")
    font = load_font(DIRECTIVE_FONT_SIZE - 2)
    gap = 30
    box_width = (area.width - 20 - gap * (len(steps) - 1)) / len(steps)
    box_height = 90
    cy = area.center[1]

    for i, step in enumerate(steps):
        x0 = area.x + 10 + i * (box_width + gap)
        color = _PALETTE[i % len(_PALETTE)]
        draw.rounded_rectangle(
            (x0, cy - box_height / 2, x0 + box_width, cy + box_height / 2),
            radius=10,
            fill=lighten_color(color, 0.6),
            outline=color,
            width=2,
        )
        draw_wrapped_text(draw, str(step), x0 + box_width / 2, cy + 4, box_width - 12, 20, font, COLORS["text"])

        if i < len(steps) - 1:
            ax0 = x0 + box_width + 4
            ax1 = x0 + box_width + gap - 4
            draw.line((ax0, cy, ax1, cy), fill=COLORS["text"], width=2)
            draw.polygon([(ax1, cy), (ax1 - 8, cy - 5), (ax1 - 8, cy + 5)], fill=COLORS["text"])


@register_directive("highlight_box")
def draw_highlight_box(draw: ImageDraw.ImageDraw, area: MediaArea, text: Any, color: str = COLORS["accent2"]) -> None:
    """Single emphasized statement in a colored box."""
    inset = 60
    box = (area.x + inset, area.y + inset, area.x + area.width - inset, area.y + area.height - inset)
    draw.rounded_rectangle(box, radius=16, fill=lighten_color(color, 0.75), outline=color, width=3)
    draw_wrapped_text(
        draw, str(text), area.center[0], area.center[1], area.width - 2 * inset - 30, 28,
        load_font(DIRECTIVE_FONT_SIZE + 4, bold=True), COLORS["text"]
    )
