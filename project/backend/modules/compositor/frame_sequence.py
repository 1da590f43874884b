"""
Frame sequence assembly for compositor module.

Expands per-scene renders into one contiguous, zero-indexed frame sequence
and materializes it as numbered image files for the encoder.
"""
import math
import shutil
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from shared.errors import IntegrityError
from shared.logging import get_logger
from shared.models.scene import Scene
from .asset_store import AssetStore
from .frame_cache import FrameDeduplicationCache

logger = get_logger("compositor.frame_sequence")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def frame_count_for(duration: float, fps: int) -> int:
    """Number of frames a duration occupies at fps."""
    return round_half_up(duration * fps)


class FrameEntry(BaseModel):
    """One output frame and the still it shows."""

    frame_index: int = Field(ge=0)
    scene_index: Optional[int] = Field(default=None, description="None for lead-in/trailing buffer frames")
    asset_ref: str


class FrameSequence(BaseModel):
    """Ordered frames of the silent video."""

    fps: int
    entries: List[FrameEntry] = Field(default_factory=list)

    @property
    def total_frames(self) -> int:
        return len(self.entries)

    @property
    def duration(self) -> float:
        return self.total_frames / self.fps

    def frames_for_scene(self, scene_index: int) -> List[FrameEntry]:
        return [e for e in self.entries if e.scene_index == scene_index]


def assemble(
    scenes: List[Scene],
    cache: FrameDeduplicationCache,
    fps: int,
    lead_in: float = 0.0,
    trailing: float = 0.0
) -> FrameSequence:
    """
    Build the frame sequence for resolved scenes.

    Scene i contributes round_half_up(effective_duration * fps) frames, all
    showing the asset of its content hash. Lead-in frames repeat the first
    scene's still and trailing frames repeat the last one.

    Args:
        scenes: Scenes with effective_duration and content_hash set
        cache: Sealed render cache
        fps: Output frame rate
        lead_in: Seconds of buffer before the first scene
        trailing: Seconds of buffer after the last scene

    Returns:
        Contiguous FrameSequence

    Raises:
        IntegrityError: If the cache is not sealed or a scene has no asset
    """
    if not cache.sealed:
        raise IntegrityError("Frame sequence assembled before the render cache was sealed")

    entries: List[FrameEntry] = []

    def append(count: int, asset_ref: str, scene_index: Optional[int]) -> None:
        for _ in range(count):
            entries.append(FrameEntry(frame_index=len(entries), scene_index=scene_index, asset_ref=asset_ref))

    assets = []
    for scene in scenes:
        asset_ref = cache.lookup(scene.content_hash) if scene.content_hash else None
        if asset_ref is None:
            raise IntegrityError(f"Scene {scene.index} has no rendered asset")
        assets.append(asset_ref)

    if scenes and lead_in > 0:
        append(frame_count_for(lead_in, fps), assets[0], None)

    for scene, asset_ref in zip(scenes, assets):
        append(frame_count_for(scene.effective_duration, fps), asset_ref, scene.index)

    if scenes and trailing > 0:
        append(frame_count_for(trailing, fps), assets[-1], None)

    logger.info(
        f"Assembled {len(entries)} frames for {len(scenes)} scenes",
        extra={"total_frames": len(entries), "fps": fps, "scene_count": len(scenes)}
    )
    return FrameSequence(fps=fps, entries=entries)


def clear_frames(frames_dir: Path) -> int:
    """Remove frame images left by an earlier run. Returns the number removed."""
    if not frames_dir.exists():
        return 0
    removed = 0
    for stale in frames_dir.glob("frame_*.png"):
        stale.unlink()
        removed += 1
    if removed:
        logger.info(f"Removed {removed} stale frames", extra={"frames_dir": str(frames_dir), "removed": removed})
    return removed


def materialize(sequence: FrameSequence, store: AssetStore, frames_dir: Path) -> Path:
    """
    Write the sequence as frames_dir/frame_000000.png, frame_000001.png, ...

    Stale frames are removed first so the directory holds exactly this
    sequence.

    Returns:
        frames_dir
    """
    frames_dir.mkdir(parents=True, exist_ok=True)
    clear_frames(frames_dir)

    for entry in sequence.entries:
        source = store.path_for(entry.asset_ref)
        shutil.copyfile(source, frames_dir / f"frame_{entry.frame_index:06d}.png")

    logger.info(
        f"Materialized {sequence.total_frames} frames",
        extra={"frames_dir": str(frames_dir), "total_frames": sequence.total_frames}
    )
    return frames_dir
