"""
Audio mixdown planning for compositor module.

Builds a declarative multi-track mix from scenes that carry narration audio,
and the FFmpeg filter graph that realizes it.
"""
from typing import List

from shared.logging import get_logger
from shared.models.scene import Scene
from shared.models.video import MixPlan, MixTrack

logger = get_logger("compositor.audio_mixdown")


def plan_mixdown(scenes: List[Scene], gain: float) -> MixPlan:
    """
    One track per scene with audio, delayed to the scene's audio start.

    Args:
        scenes: Scenes with audio_delay resolved
        gain: Per-track volume multiplier

    Returns:
        MixPlan, without tracks when no scene has audio
    """
    tracks = [
        MixTrack(
            scene_index=scene.index,
            asset_ref=scene.audio_asset_ref,
            delay_seconds=scene.audio_delay,
            gain=gain,
            duration=scene.actual_audio_duration
        )
        for scene in scenes
        if scene.has_audio
    ]

    if not tracks:
        logger.info("No audio tracks, video will be silent")
        return MixPlan.no_audio()

    plan = MixPlan(tracks=tracks)
    logger.info(
        f"Planned mixdown of {len(tracks)} tracks ({plan.duration:.2f}s)",
        extra={"track_count": len(tracks), "mix_duration": plan.duration}
    )
    return plan


def build_filter_complex(plan: MixPlan, first_input: int = 1) -> str:
    """
    FFmpeg filter graph that delays, scales and mixes every track.

    Track k is expected at input index first_input + k. The mixed stream is
    labelled [audioout] and lasts as long as the longest delayed track.
    """
    parts = []
    labels = []
    for k, track in enumerate(plan.tracks):
        delay_ms = int(track.delay_seconds * 1000 + 0.5)
        parts.append(f"[{first_input + k}:a]volume={track.gain},adelay={delay_ms}|{delay_ms}[a{k}]")
        labels.append(f"[a{k}]")
    parts.append(f"{''.join(labels)}amix=inputs={len(plan.tracks)}:duration=longest[audioout]")
    return ";".join(parts)
