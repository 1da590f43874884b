"""
Drawing surface module.

Renders lesson slides as still images. Visual directives are resolved
through a static registry; importing this package registers the built-in
directives.
"""

from modules.drawing_surface import directives  # noqa: F401  (registers built-ins)
from modules.drawing_surface.registry import (
    DrawingHandler,
    MediaArea,
    available_directives,
    get_handler,
    register_directive,
    validate_directive_names,
)
from modules.drawing_surface.surface import SlideContent, render_placeholder, render_slide

__all__ = [
    "DrawingHandler",
    "MediaArea",
    "SlideContent",
    "available_directives",
    "get_handler",
    "register_directive",
    "render_placeholder",
    "render_slide",
    "validate_directive_names",
]
