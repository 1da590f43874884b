"""
Lesson data models.

Defines Speaker, VisualDirective, Scene and Lesson models. Scene carries both
the caller supplied fields and the fields the compositor fills in as the run
progresses.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Speaker(BaseModel):
    """A narrator in the lesson. Immutable for the run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    voice: str = Field(description="Voice identifier passed to the speech synthesizer")
    model: str = Field(default="lightning", description="Speech synthesis model name")
    color: str = Field(default="#1a5276", description="Display color as #rrggbb")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Colors are drawn by the slide renderer and must be #rrggbb."""
        if len(v) != 7 or not v.startswith("#"):
            raise ValueError(f"color must be in #rrggbb format, got {v!r}")
        int(v[1:], 16)
        return v.lower()


class VisualDirective(BaseModel):
    """Named drawing directive with ordered parameters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="type")
    params: List[Any] = Field(default_factory=list)

    def identity(self) -> Dict[str, Any]:
        """Canonical representation used for content hashing."""
        return {"type": self.name, "params": list(self.params)}


class Scene(BaseModel):
    """One narrated, visually directed unit of the lesson timeline."""

    model_config = ConfigDict(populate_by_name=True)

    index: int = Field(default=0, ge=0, description="Position in the input order")
    speaker: str
    title: str
    content: str = ""
    content2: Optional[str] = None
    narration: str
    visual: Optional[VisualDirective] = None
    equation: Optional[str] = None
    visual_duration_hint: float = Field(default=4.0, gt=0, alias="visualDuration")
    is_complex: bool = Field(default=False, alias="isComplex")

    # Owned by the compositor, never set by callers
    actual_audio_duration: float = 0.0
    effective_duration: float = 0.0
    audio_delay: float = 0.0
    audio_asset_ref: Optional[str] = None
    content_hash: Optional[str] = None
    render_asset_ref: Optional[str] = None

    @property
    def has_audio(self) -> bool:
        """Whether narration audio was produced for this scene."""
        return bool(self.audio_asset_ref) and self.actual_audio_duration > 0

    def visual_identity(self) -> Dict[str, Any]:
        """
        Fields that determine what the rendered still looks like.

        Narration and timing hints are excluded, so two scenes can share a
        render while having distinct narration.
        """
        return {
            "speaker": self.speaker,
            "title": self.title,
            "content": self.content or "",
            "content2": self.content2 or "",
            "visual": self.visual.identity() if self.visual else None,
            "equation": self.equation or None,
        }


class Lesson(BaseModel):
    """Speakers plus the ordered scenes of a lesson."""

    speakers: Dict[str, Speaker]
    scenes: List[Scene]

    def speaker_for(self, scene: Scene) -> Speaker:
        """Look up the speaker of a scene."""
        return self.speakers[scene.speaker]
