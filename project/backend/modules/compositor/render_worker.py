"""
Render worker for compositor module.

Workers receive a self-contained RenderTask and answer with a RenderResult.
Nothing here touches run state, so the same function runs in a thread or in
a separate OS process.
"""
from pathlib import Path
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, Field

from modules.drawing_surface import SlideContent, render_slide

RenderFn = Callable[[SlideContent, Path], Path]


class RenderTask(BaseModel):
    """Message sent from the coordinator to a render worker."""

    content_hash: str
    directive: Optional[str] = None
    params: List[Any] = Field(default_factory=list)
    output_ref: str = Field(..., description="Asset key the worker writes to")
    output_path: Path
    slide: SlideContent


class RenderResult(BaseModel):
    """Message sent back from a render worker."""

    content_hash: str
    success: bool
    asset_ref: Optional[str] = None
    error: Optional[str] = None


def execute_render_task(task: RenderTask, render_fn: RenderFn = render_slide) -> RenderResult:
    """
    Render one unique slide.

    Failures are reported in the result rather than raised, so one bad
    slide never takes down the batch.
    """
    try:
        render_fn(task.slide, task.output_path)
    except Exception as e:
        return RenderResult(
            content_hash=task.content_hash,
            success=False,
            error=f"{type(e).__name__}: {e}"
        )
    return RenderResult(content_hash=task.content_hash, success=True, asset_ref=task.output_ref)
