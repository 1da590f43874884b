"""
Directive registry for drawing surface module.

Static table of directive name -> drawing handler, populated at import time.
A scene naming a directive that is not registered is rejected before any
rendering starts.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from PIL import ImageDraw

from shared.errors import ValidationError


@dataclass(frozen=True)
class MediaArea:
    """Rectangle of the slide reserved for the directive's drawing."""

    x: int
    y: int
    width: int
    height: int

    @property
    def center(self):
        return self.x + self.width / 2, self.y + self.height / 2

    @property
    def box(self):
        return self.x, self.y, self.x + self.width, self.y + self.height


class DrawingHandler(Protocol):
    """Draws one directive into the media area of a slide."""

    def __call__(self, draw: ImageDraw.ImageDraw, area: MediaArea, *params: Any) -> None:
        ...


_DIRECTIVES: Dict[str, DrawingHandler] = {}


def register_directive(name: str) -> Callable[[DrawingHandler], DrawingHandler]:
    """
    Decorator registering a drawing handler under a directive name.

    Example:
        @register_directive("bullet_list")
        def draw_bullet_list(draw, area, *items):
            ...
    """
    def decorator(handler: DrawingHandler) -> DrawingHandler:
        if name in _DIRECTIVES and _DIRECTIVES[name] is not handler:
            raise ValueError(f"Directive already registered: {name}")
        _DIRECTIVES[name] = handler
        return handler
    return decorator


def get_handler(name: str) -> DrawingHandler:
    """
    Resolve a directive name to its handler.

    Raises:
        ValidationError: If no handler is registered under name
    """
    handler = _DIRECTIVES.get(name)
    if handler is None:
        raise ValidationError(
            f"Unknown visual directive '{name}'. Available directives: {', '.join(available_directives())}"
        )
    return handler


def is_registered(name: str) -> bool:
    return name in _DIRECTIVES


def available_directives() -> List[str]:
    return sorted(_DIRECTIVES)


def validate_directive_names(names: Iterable[Optional[str]]) -> None:
    """
    Check that every named directive is registered.

    None entries (scenes without a visual) are skipped.

    Raises:
        ValidationError: Listing all unknown names at once
    """
    unknown = sorted({n for n in names if n is not None and n not in _DIRECTIVES})
    if unknown:
        raise ValidationError(
            f"Unknown visual directive(s): {', '.join(unknown)}. "
            f"Available directives: {', '.join(available_directives())}"
        )
