"""
Composition data models.

Defines MixTrack, MixPlan and CompositionResult models.
"""

from pathlib import Path
from typing import Dict, List
from pydantic import BaseModel, Field, field_serializer


class MixTrack(BaseModel):
    """One delayed narration track in the final audio mix."""

    scene_index: int
    asset_ref: str
    delay_seconds: float = Field(ge=0, description="Absolute start offset in the final timeline")
    gain: float = Field(gt=0, description="Linear volume multiplier applied before mixing")
    duration: float = Field(gt=0, description="Track duration in seconds")

    @property
    def end_time(self) -> float:
        """Time at which this track stops playing."""
        return self.delay_seconds + self.duration


class MixPlan(BaseModel):
    """
    Declarative multi-track mix.

    A plan without tracks means the run has no audio and the silent video
    is passed through unchanged.
    """

    tracks: List[MixTrack] = Field(default_factory=list)

    @classmethod
    def no_audio(cls) -> "MixPlan":
        """Plan for a run in which no scene carries audio."""
        return cls(tracks=[])

    @property
    def is_no_audio(self) -> bool:
        """Whether this plan carries no tracks at all."""
        return not self.tracks

    @property
    def duration(self) -> float:
        """Mix length: the latest end time of any constituent track."""
        if not self.tracks:
            return 0.0
        return max(track.end_time for track in self.tracks)


class CompositionResult(BaseModel):
    """Final composed lesson video."""

    output_path: Path
    target_duration: float = Field(description="Resolved timeline duration in seconds")
    total_frames: int
    fps: int
    scene_count: int
    unique_renders: int = Field(description="Number of distinct content hashes rendered")
    reused_scenes: int = Field(description="Scenes that inherited a render from their master")
    failed_renders: int = Field(description="Content hashes that fell back to a placeholder")
    silent_scenes: int = Field(description="Scenes without narration audio")
    audio_tracks: int
    timings: Dict[str, float] = Field(default_factory=dict, description="Per-phase wall time in seconds")

    @field_serializer("output_path")
    def serialize_path(self, value: Path) -> str:
        """Serialize Path to string."""
        return str(value)
