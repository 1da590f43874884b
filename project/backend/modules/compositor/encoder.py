"""
Media encoder gateway for compositor module.

Two FFmpeg passes: encode the numbered frames into a silent H.264 video,
then mux the planned audio mix onto it. Any failure here is fatal for the
run; assets produced so far stay on disk for the next attempt.
"""
import shutil
from pathlib import Path
from typing import Optional

from shared.config import settings
from shared.errors import CompositionError, PipelineFatalError
from shared.logging import get_logger
from shared.models.video import MixPlan
from .asset_store import AssetStore
from .audio_mixdown import build_filter_complex
from .config import (
    FFMPEG_TIMEOUT,
    FRAME_FILENAME_PATTERN,
    OUTPUT_AUDIO_BITRATE,
    OUTPUT_AUDIO_CODEC,
    OUTPUT_PIXEL_FORMAT,
    OUTPUT_VIDEO_CODEC,
)
from .utils import run_ffmpeg_command

logger = get_logger("compositor.encoder")


def _check_output(output_path: Path, stage: str) -> None:
    if not output_path.exists() or output_path.stat().st_size == 0:
        raise PipelineFatalError(f"{stage} produced no output at {output_path}")


class MediaEncoderGateway:
    """Drives the external encoder process."""

    def __init__(self, store: AssetStore, timeout: Optional[int] = None):
        """
        Initialize gateway.

        Args:
            store: Asset store used to resolve audio track keys
            timeout: Per-command timeout in seconds
        """
        self.store = store
        self.timeout = timeout or FFMPEG_TIMEOUT

    async def encode_frame_sequence(
        self,
        frames_dir: Path,
        fps: int,
        target_duration: float,
        output_path: Path
    ) -> Path:
        """
        Encode frames_dir/frame_%06d.png into a silent video.

        Args:
            frames_dir: Directory of materialized frames
            fps: Input frame rate
            target_duration: Upper bound on output duration in seconds
            output_path: Destination video path

        Returns:
            output_path

        Raises:
            PipelineFatalError: If encoding fails
        """
        ffmpeg_cmd = [
            settings.ffmpeg_bin,
            "-framerate", str(fps),
            "-i", str(Path(frames_dir) / FRAME_FILENAME_PATTERN),
            "-c:v", OUTPUT_VIDEO_CODEC,
            "-pix_fmt", OUTPUT_PIXEL_FORMAT,
            "-t", f"{target_duration:.3f}",
            "-y",
            str(output_path)
        ]

        logger.info(
            "Encoding silent video",
            extra={"fps": fps, "target_duration": target_duration, "output_path": str(output_path)}
        )

        try:
            await run_ffmpeg_command(ffmpeg_cmd, timeout=self.timeout, label="encode frames")
        except CompositionError as e:
            raise PipelineFatalError(f"Failed to encode frame sequence: {e.message}") from e

        _check_output(output_path, "Frame encoding")
        return output_path

    async def mux_audio(self, silent_video: Path, mix_plan: MixPlan, output_path: Path) -> Path:
        """
        Combine the silent video with the mixed narration.

        A plan without tracks copies the silent video byte for byte.

        Raises:
            PipelineFatalError: If muxing or the copy fails
        """
        if mix_plan.is_no_audio:
            logger.info("No audio to mix, copying silent video", extra={"output_path": str(output_path)})
            try:
                shutil.copyfile(silent_video, output_path)
            except OSError as e:
                raise PipelineFatalError(f"Failed to copy silent video: {e}") from e
            return output_path

        ffmpeg_cmd = [settings.ffmpeg_bin, "-i", str(silent_video)]
        for track in mix_plan.tracks:
            ffmpeg_cmd.extend(["-i", str(self.store.path_for(track.asset_ref))])
        ffmpeg_cmd.extend([
            "-filter_complex", build_filter_complex(mix_plan),
            "-map", "0:v",
            "-map", "[audioout]",
            "-c:v", "copy",
            "-c:a", OUTPUT_AUDIO_CODEC,
            "-b:a", OUTPUT_AUDIO_BITRATE,
            "-shortest",
            "-y",
            str(output_path)
        ])

        logger.info(
            f"Muxing {len(mix_plan.tracks)} audio tracks",
            extra={"track_count": len(mix_plan.tracks), "mix_duration": mix_plan.duration}
        )

        try:
            await run_ffmpeg_command(ffmpeg_cmd, timeout=self.timeout, label="mux audio")
        except CompositionError as e:
            raise PipelineFatalError(f"Failed to mux audio: {e.message}") from e

        _check_output(output_path, "Audio muxing")
        return output_path
