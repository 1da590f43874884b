"""
Scene timing resolution for compositor module.

Computes each scene's effective duration and absolute audio start offset
from its visual duration hint and the (already probed) narration duration.
"""
from typing import List, Optional

from pydantic import BaseModel

from shared.logging import get_logger
from shared.models.scene import Scene
from .config import TimingConfig

logger = get_logger("compositor.timing")


class Timeline(BaseModel):
    """Resolved timing for a whole run."""

    effective_durations: List[float]
    audio_delays: List[float]
    target_duration: float

    @property
    def inner_duration(self) -> float:
        """Duration covered by scenes alone, without lead-in/trailing buffers."""
        return sum(self.effective_durations)


def calculate_effective_duration(
    scene: Scene,
    previous: Optional[Scene],
    timing: TimingConfig
) -> float:
    """
    Apply the timing rules to one scene.

    Args:
        scene: Scene with actual_audio_duration already set (0 if unavailable)
        previous: Scene immediately before this one, None for the first scene
        timing: Timing rule constants

    Returns:
        Effective duration in seconds
    """
    audio = scene.actual_audio_duration or 0.0
    duration = max(scene.visual_duration_hint, audio, timing.min_slide_duration)

    if audio > 0:
        duration = max(duration, audio + timing.post_audio_pause)

    if scene.is_complex:
        duration += timing.complex_slide_bonus

    if previous is not None and previous.speaker != scene.speaker:
        duration += timing.speaker_change_pause

    return duration


def resolve_timing(scenes: List[Scene], timing: Optional[TimingConfig] = None) -> Timeline:
    """
    Resolve effective durations and audio delays for all scenes.

    Writes effective_duration and audio_delay onto every scene in place and
    returns the resolved timeline. Pure with respect to its inputs: running
    it twice over the same scenes yields the same result.

    Args:
        scenes: Ordered scenes annotated with actual_audio_duration
        timing: Timing rule constants (defaults from module config)

    Returns:
        Timeline with per-scene durations, delays, and the target duration
    """
    timing = timing or TimingConfig()
    cursor = timing.initial_buffer
    durations: List[float] = []
    delays: List[float] = []

    for i, scene in enumerate(scenes):
        previous = scenes[i - 1] if i > 0 else None
        scene.effective_duration = calculate_effective_duration(scene, previous, timing)
        scene.audio_delay = cursor
        cursor += scene.effective_duration

        durations.append(scene.effective_duration)
        delays.append(scene.audio_delay)

        logger.debug(
            f"Scene {i + 1}: {scene.effective_duration:.2f}s, audio starts at {scene.audio_delay:.2f}s",
            extra={"scene_index": i, "effective_duration": scene.effective_duration, "audio_delay": scene.audio_delay}
        )

    target_duration = cursor + timing.trailing_buffer

    logger.info(
        f"Resolved timing for {len(scenes)} scenes (target duration: {target_duration:.2f}s)",
        extra={"scene_count": len(scenes), "target_duration": target_duration}
    )

    return Timeline(
        effective_durations=durations,
        audio_delays=delays,
        target_duration=target_duration
    )
