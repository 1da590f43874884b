"""
Run context for compositor module.

Everything one run owns (lesson, configuration, asset store, render cache,
workspace paths) lives on a RunContext instance that is passed explicitly
between stages. Two runs never share state.
"""
from pathlib import Path
from typing import Optional, Union
from uuid import uuid4

from shared.models.scene import Lesson
from .asset_store import AssetStore
from .config import (
    CompositorConfig,
    FRAMES_DIRNAME,
    FRAME_FILENAME_PATTERN,
    SILENT_VIDEO_FILENAME,
)
from .frame_cache import FrameDeduplicationCache


class RunContext:
    """State owned by a single composition run."""

    def __init__(
        self,
        lesson: Lesson,
        output_dir: Union[str, Path],
        video_name: str,
        config: Optional[CompositorConfig] = None,
        run_id: Optional[str] = None
    ):
        self.lesson = lesson
        self.config = config or CompositorConfig()
        self.video_name = video_name
        self.run_id = run_id or str(uuid4())
        self.store = AssetStore(output_dir)
        self.cache = FrameDeduplicationCache()

    @property
    def scenes(self):
        return self.lesson.scenes

    @property
    def output_dir(self) -> Path:
        return self.store.root

    @property
    def frames_dir(self) -> Path:
        return self.output_dir / FRAMES_DIRNAME

    @property
    def frame_pattern(self) -> Path:
        return self.frames_dir / FRAME_FILENAME_PATTERN

    @property
    def silent_video_path(self) -> Path:
        return self.output_dir / SILENT_VIDEO_FILENAME

    @property
    def final_video_path(self) -> Path:
        return self.output_dir / f"{self.video_name}.mp4"
