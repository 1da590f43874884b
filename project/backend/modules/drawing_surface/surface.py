"""
Slide renderer for drawing surface module.

Draws one lesson slide (speaker background, avatars, text, media area,
directive, equation) onto a 1000x700 canvas and saves it as PNG.
"""
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image, ImageDraw
from pydantic import BaseModel, Field

from shared.errors import RenderError
from shared.logging import get_logger
from shared.models.scene import Scene, Speaker, VisualDirective
from .config import (
    CANVAS_WIDTH,
    CANVAS_HEIGHT,
    AVATAR_X,
    AVATAR_Y,
    AVATAR_SPACING,
    AVATAR_SIZE,
    AVATAR_SKIN,
    AVATAR_FEATURES,
    AVATAR_NAME_FONT_SIZE,
    TITLE_X,
    TITLE_Y,
    TITLE_WIDTH,
    TITLE_FONT_SIZE,
    CONTENT_X,
    CONTENT_Y,
    CONTENT_WIDTH,
    CONTENT_LINE_HEIGHT,
    CONTENT2_X,
    CONTENT2_Y,
    CONTENT2_WIDTH,
    CONTENT2_LINE_HEIGHT,
    CONTENT_FONT_SIZE,
    MEDIA_X,
    MEDIA_Y,
    MEDIA_WIDTH,
    MEDIA_HEIGHT,
    MEDIA_BORDER,
    MEDIA_BORDER_COLOR,
    EQUATION_FONT_SIZE,
    DIRECTIVE_FONT_SIZE,
    COLORS,
    SPEAKER_BACKGROUNDS,
)
from .primitives import draw_centered_text, draw_wrapped_text, lighten_color, load_font
from .registry import MediaArea, get_handler

logger = get_logger("drawing_surface.surface")

MEDIA_AREA = MediaArea(MEDIA_X, MEDIA_Y, MEDIA_WIDTH, MEDIA_HEIGHT)


class SlideContent(BaseModel):
    """Everything needed to draw one slide, self-contained so it can cross a process boundary."""

    speaker: str
    title: str
    content: str = ""
    content2: Optional[str] = None
    equation: Optional[str] = None
    visual: Optional[VisualDirective] = None
    roster: List[Speaker] = Field(default_factory=list, description="All speakers, in display order")

    @classmethod
    def from_scene(cls, scene: Scene, roster: List[Speaker]) -> "SlideContent":
        return cls(
            speaker=scene.speaker,
            title=scene.title,
            content=scene.content,
            content2=scene.content2,
            equation=scene.equation,
            visual=scene.visual,
            roster=roster,
        )


def _draw_background(draw: ImageDraw.ImageDraw, speaker: str) -> None:
    color = SPEAKER_BACKGROUNDS.get(speaker, COLORS["background"])
    draw.rectangle((0, 0, CANVAS_WIDTH, CANVAS_HEIGHT), fill=color)


def _draw_avatar(draw: ImageDraw.ImageDraw, x: float, y: float, speaker: Speaker, is_active: bool) -> None:
    radius = AVATAR_SIZE / 2

    draw.ellipse(
        (x - radius, y - radius, x + radius, y + radius),
        fill=AVATAR_SKIN if is_active else lighten_color(AVATAR_SKIN, 0.4),
        outline=speaker.color if is_active else lighten_color(speaker.color, 0.3),
        width=3 if is_active else 1,
    )

    # Face
    face = radius * 0.8
    feature_color = AVATAR_FEATURES if is_active else lighten_color(AVATAR_FEATURES, 0.5)
    eye = max(face * 0.06, 1)
    for eye_x in (x - face * 0.3, x + face * 0.3):
        eye_y = y - face * 0.2
        draw.ellipse((eye_x - eye, eye_y - eye, eye_x + eye, eye_y + eye), fill=feature_color)
    smile = face * 0.3
    smile_y = y + face * 0.1
    draw.arc((x - smile, smile_y - smile, x + smile, smile_y + smile), start=0, end=180, fill=feature_color, width=1)

    name_color = COLORS["text"] if is_active else lighten_color(COLORS["text"], 0.4)
    draw_centered_text(draw, speaker.name, x, y + radius + 16, load_font(AVATAR_NAME_FONT_SIZE, bold=is_active), name_color)


def _draw_avatars(draw: ImageDraw.ImageDraw, active_speaker: str, roster: List[Speaker]) -> None:
    for i, speaker in enumerate(roster):
        x = AVATAR_X + AVATAR_SIZE / 2
        y = AVATAR_Y + i * AVATAR_SPACING + AVATAR_SIZE / 2
        _draw_avatar(draw, x, y, speaker, speaker.id == active_speaker)


def _draw_text_content(draw: ImageDraw.ImageDraw, slide: SlideContent) -> None:
    draw_wrapped_text(
        draw, slide.title, TITLE_X, TITLE_Y, TITLE_WIDTH, TITLE_FONT_SIZE,
        load_font(TITLE_FONT_SIZE, bold=True), COLORS["primary"]
    )

    font = load_font(CONTENT_FONT_SIZE)
    if slide.content:
        draw_wrapped_text(
            draw, slide.content, CONTENT_X, CONTENT_Y, CONTENT_WIDTH, CONTENT_LINE_HEIGHT, font, COLORS["text"]
        )
    if slide.content2:
        y = CONTENT2_Y + (CONTENT_LINE_HEIGHT if slide.content else 0)
        draw_wrapped_text(
            draw, slide.content2, CONTENT2_X, y, CONTENT2_WIDTH, CONTENT2_LINE_HEIGHT, font, COLORS["text"]
        )

    draw.rectangle(MEDIA_AREA.box, outline=MEDIA_BORDER_COLOR, width=MEDIA_BORDER)


def _draw_equation(draw: ImageDraw.ImageDraw, equation: str) -> None:
    center_x, center_y = MEDIA_AREA.center
    draw_centered_text(draw, equation, center_x, center_y, load_font(EQUATION_FONT_SIZE), COLORS["text"])


def _new_canvas(slide: SlideContent):
    image = Image.new("RGB", (CANVAS_WIDTH, CANVAS_HEIGHT), COLORS["white"])
    draw = ImageDraw.Draw(image)
    _draw_background(draw, slide.speaker)
    _draw_avatars(draw, slide.speaker, slide.roster)
    _draw_text_content(draw, slide)
    return image, draw


def _save_png(image: Image.Image, output_path: Path) -> None:
    """Write image as PNG through a sibling .part file, so output_path is complete or absent."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = output_path.with_name(output_path.name + ".part")
    try:
        image.save(tmp_path, format="PNG")
        tmp_path.replace(output_path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def render_slide(slide: SlideContent, output_path: Union[str, Path]) -> Path:
    """
    Render a slide and save it as PNG.

    Args:
        slide: Slide content
        output_path: Destination PNG path

    Returns:
        Path of the written PNG

    Raises:
        ValidationError: If the slide names an unregistered directive
        RenderError: If the directive handler or the write fails
    """
    output_path = Path(output_path)
    image, draw = _new_canvas(slide)

    if slide.visual is not None:
        handler = get_handler(slide.visual.name)
        try:
            handler(draw, MEDIA_AREA, *slide.visual.params)
        except Exception as e:
            raise RenderError(f"Directive '{slide.visual.name}' failed: {e}") from e

    if slide.equation:
        _draw_equation(draw, slide.equation)

    try:
        _save_png(image, output_path)
    except OSError as e:
        raise RenderError(f"Failed to write slide {output_path}: {e}") from e

    return output_path


def render_placeholder(slide: SlideContent, reason: str, output_path: Union[str, Path]) -> Path:
    """
    Render a visibly marked substitute for a slide whose render failed.

    Keeps the slide's text so the viewer still sees the lesson progress;
    the media area is crossed out and labelled with the failure.
    """
    output_path = Path(output_path)
    image, draw = _new_canvas(slide)

    error_color = COLORS["error"]
    draw.rectangle(MEDIA_AREA.box, outline=error_color, width=4)
    x0, y0, x1, y1 = MEDIA_AREA.box
    draw.line((x0, y0, x1, y1), fill=lighten_color(error_color, 0.5), width=2)
    draw.line((x0, y1, x1, y0), fill=lighten_color(error_color, 0.5), width=2)

    center_x, center_y = MEDIA_AREA.center
    label = "Missing visual"
    if slide.visual is not None:
        label = f"Missing visual: {slide.visual.name}"
    draw_centered_text(draw, label, center_x, center_y, load_font(DIRECTIVE_FONT_SIZE, bold=True), error_color)
    draw_wrapped_text(
        draw, reason[:200], center_x, center_y + 30, MEDIA_WIDTH - 40, 20,
        load_font(DIRECTIVE_FONT_SIZE - 4), COLORS["text"]
    )

    _save_png(image, output_path)
    logger.warning(
        f"Rendered placeholder for '{slide.title}'",
        extra={"output_path": str(output_path), "reason": reason}
    )
    return output_path
