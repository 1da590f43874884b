"""
Compositor configuration.

Centralized timing rules, concurrency limits, and FFmpeg output settings.
"""
import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

# Frame rate of the rendered sequence
FPS = int(os.getenv("COMPOSITOR_FPS", "30"))

# Timing rules (seconds)
POST_AUDIO_PAUSE = float(os.getenv("POST_AUDIO_PAUSE", "1.5"))
MIN_SLIDE_DURATION = float(os.getenv("MIN_SLIDE_DURATION", "4.0"))
COMPLEX_SLIDE_BONUS = float(os.getenv("COMPLEX_SLIDE_BONUS", "2.0"))
SPEAKER_CHANGE_PAUSE = float(os.getenv("SPEAKER_CHANGE_PAUSE", "0.3"))
INITIAL_BUFFER = float(os.getenv("INITIAL_BUFFER", "1.0"))
TRAILING_BUFFER = float(os.getenv("TRAILING_BUFFER", "1.0"))

# Concurrency: members per batch, a batch finishes before the next one starts
MAX_PARALLEL_AUDIO = int(os.getenv("MAX_PARALLEL_AUDIO", "3"))
MAX_PARALLEL_RENDERS = int(os.getenv("MAX_PARALLEL_RENDERS", "5"))
RENDER_BACKEND = os.getenv("RENDER_BACKEND", "thread")  # thread | process
RENDER_WORKERS = int(os.getenv("RENDER_WORKERS", str(min(os.cpu_count() or 1, 8))))
RENDER_START_METHOD = os.getenv("RENDER_START_METHOD") or None  # fork | spawn | forkserver, platform default if unset

# Audio
MIX_TRACK_GAIN = float(os.getenv("MIX_TRACK_GAIN", "3.0"))  # amix divides by input count
APPLY_VOLUME_BOOST = os.getenv("APPLY_VOLUME_BOOST", "true").lower() == "true"
VOLUME_BOOST = os.getenv("VOLUME_BOOST", "3dB")

# FFmpeg settings
FFMPEG_TIMEOUT = int(os.getenv("FFMPEG_TIMEOUT", "600"))
OUTPUT_VIDEO_CODEC = "libx264"
OUTPUT_PIXEL_FORMAT = "yuv420p"
OUTPUT_AUDIO_CODEC = "aac"
OUTPUT_AUDIO_BITRATE = "192k"

# Workspace layout
FRAMES_DIRNAME = "frames"
UNIQUE_FRAMES_DIRNAME = "unique_frames"
AUDIO_DIRNAME = "audio"
BOOSTED_AUDIO_DIRNAME = "boosted"
SILENT_VIDEO_FILENAME = "temp-video_silent.mp4"
FRAME_FILENAME_PATTERN = "frame_%06d.png"


class TimingConfig(BaseModel):
    """Timing rule constants used by the scene timing resolver."""

    min_slide_duration: float = Field(default=MIN_SLIDE_DURATION, gt=0)
    post_audio_pause: float = Field(default=POST_AUDIO_PAUSE, ge=0)
    complex_slide_bonus: float = Field(default=COMPLEX_SLIDE_BONUS, ge=0)
    speaker_change_pause: float = Field(default=SPEAKER_CHANGE_PAUSE, ge=0)
    initial_buffer: float = Field(default=INITIAL_BUFFER, ge=0)
    trailing_buffer: float = Field(default=TRAILING_BUFFER, ge=0)


class CompositorConfig(BaseModel):
    """
    Engine configuration.

    The "optimized" and "direct" generator variants differ only in these
    flags, so both run through the same engine.
    """

    fps: int = Field(default=FPS, gt=0)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    max_parallel_audio: int = Field(default=MAX_PARALLEL_AUDIO, ge=1)
    max_parallel_renders: int = Field(default=MAX_PARALLEL_RENDERS, ge=1)
    render_backend: Literal["thread", "process"] = RENDER_BACKEND
    render_workers: int = Field(default=RENDER_WORKERS, ge=1)
    process_start_method: Optional[Literal["fork", "spawn", "forkserver"]] = RENDER_START_METHOD
    mix_track_gain: float = Field(default=MIX_TRACK_GAIN, gt=0)
    apply_volume_boost: bool = APPLY_VOLUME_BOOST
    volume_boost: str = VOLUME_BOOST
    pad_timeline_buffers: bool = Field(
        default=False,
        description="Add lead-in/trailing frames so the silent video spans the whole target duration"
    )
    ffmpeg_timeout: int = Field(default=FFMPEG_TIMEOUT, gt=0)
