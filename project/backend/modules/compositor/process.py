"""
Main entry point for compositor module.

Orchestrates a lesson composition: validate the lesson, synthesize narration
and render unique slides, resolve timing, assemble and encode the frame
sequence, then mux the planned audio mix.
"""
import asyncio
import time
from pathlib import Path
from typing import Optional, Union

from modules.drawing_surface import render_slide
from modules.speech_synthesizer import SmallestAISynthesizer
from shared.config import settings
from shared.errors import IntegrityError, PipelineError, ValidationError
from shared.logging import get_logger, set_run_id
from shared.models.scene import Lesson
from shared.models.video import CompositionResult
from .audio_mixdown import plan_mixdown
from .config import CompositorConfig
from .context import RunContext
from .encoder import MediaEncoderGateway
from .frame_sequence import assemble, materialize
from .loader import validate_lesson
from .render_worker import RenderFn
from .scheduler import ParallelRenderScheduler, SpeechSynthesizer
from .timing import resolve_timing
from .utils import check_ffmpeg_available

logger = get_logger("compositor.process")


def _default_synthesizer() -> Optional[SpeechSynthesizer]:
    if not settings.speech_enabled:
        logger.warning("SMALLEST_API_KEY not set, skipping audio generation")
        return None
    return SmallestAISynthesizer()


async def process(
    lesson: Lesson,
    output_dir: Optional[Union[str, Path]] = None,
    video_name: str = "lesson",
    config: Optional[CompositorConfig] = None,
    synthesizer: Optional[SpeechSynthesizer] = None,
    render_fn: RenderFn = render_slide,
    run_id: Optional[str] = None
) -> CompositionResult:
    """
    Compose a lesson into one video.

    Args:
        lesson: Speakers and ordered scenes
        output_dir: Run workspace and output directory (defaults to OUTPUT_DIR)
        video_name: Final video file name without extension
        config: Engine configuration (defaults from module config)
        synthesizer: Speech synthesizer; defaults to the Smallest.ai client
            when an API key is configured, otherwise the lesson is silent
        render_fn: Slide renderer run by the render workers
        run_id: Identifier used in logs (generated if omitted)

    Returns:
        CompositionResult describing the final video

    Raises:
        ValidationError: If the lesson or environment cannot be composed
        IntegrityError: If an internal invariant is violated
        PipelineFatalError: If encoding or muxing fails
    """
    context = RunContext(
        lesson=lesson,
        output_dir=output_dir or settings.output_dir,
        video_name=video_name,
        config=config,
        run_id=run_id
    )
    set_run_id(context.run_id)
    config = context.config
    start_time = time.time()

    timings = {
        "validate": 0.0,
        "audio_and_render": 0.0,
        "resolve_timing": 0.0,
        "assemble_frames": 0.0,
        "encode_video": 0.0,
        "mux_audio": 0.0,
        "total": 0.0
    }

    try:
        # Step 1: Validation
        step_start = time.time()
        if not check_ffmpeg_available():
            raise ValidationError(
                f"FFmpeg not found ({settings.ffmpeg_bin}). Please install FFmpeg:\n"
                "  macOS: brew install ffmpeg\n"
                "  Linux: apt-get install ffmpeg or yum install ffmpeg\n"
                "  Windows: Download from https://ffmpeg.org/"
            )
        validate_lesson(lesson)
        if synthesizer is None:
            synthesizer = _default_synthesizer()
        timings["validate"] = time.time() - step_start

        logger.info(
            f"Composing '{video_name}' from {len(lesson.scenes)} scenes",
            extra={"video_name": video_name, "scene_count": len(lesson.scenes), "output_dir": str(context.output_dir)}
        )

        # Step 2: Audio synthesis and unique renders
        step_start = time.time()
        scheduler = ParallelRenderScheduler(context, synthesizer=synthesizer, render_fn=render_fn)
        report = await scheduler.run()
        timings["audio_and_render"] = time.time() - step_start

        # Step 3: Timing (needs probed audio durations)
        step_start = time.time()
        timeline = resolve_timing(context.scenes, config.timing)
        timings["resolve_timing"] = time.time() - step_start

        # Step 4: Frame sequence
        step_start = time.time()
        lead_in = config.timing.initial_buffer if config.pad_timeline_buffers else 0.0
        trailing = config.timing.trailing_buffer if config.pad_timeline_buffers else 0.0
        sequence = assemble(context.scenes, context.cache, config.fps, lead_in=lead_in, trailing=trailing)
        await asyncio.to_thread(materialize, sequence, context.store, context.frames_dir)
        timings["assemble_frames"] = time.time() - step_start

        # Step 5: Silent video
        step_start = time.time()
        encoder = MediaEncoderGateway(context.store, timeout=config.ffmpeg_timeout)
        silent_video = await encoder.encode_frame_sequence(
            context.frames_dir, config.fps, timeline.target_duration, context.silent_video_path
        )
        timings["encode_video"] = time.time() - step_start

        # Step 6: Audio mixdown
        step_start = time.time()
        mix_plan = plan_mixdown(context.scenes, config.mix_track_gain)
        output_path = await encoder.mux_audio(silent_video, mix_plan, context.final_video_path)
        timings["mux_audio"] = time.time() - step_start

        timings["total"] = time.time() - start_time

        silent_scenes = sum(1 for scene in context.scenes if not scene.has_audio)
        if len(mix_plan.tracks) + silent_scenes != len(context.scenes):
            raise IntegrityError("Mix tracks do not match the scenes carrying audio")

        result = CompositionResult(
            output_path=output_path,
            target_duration=timeline.target_duration,
            total_frames=sequence.total_frames,
            fps=config.fps,
            scene_count=len(context.scenes),
            unique_renders=len(context.cache),
            reused_scenes=report.duplicate_scenes,
            failed_renders=context.cache.placeholder_count,
            silent_scenes=silent_scenes,
            audio_tracks=len(mix_plan.tracks),
            timings=timings
        )

        logger.info(
            f"Composition complete: {output_path} ({timeline.target_duration:.2f}s, {sequence.total_frames} frames)",
            extra={
                "output_path": str(output_path),
                "target_duration": timeline.target_duration,
                "total_frames": sequence.total_frames,
                "unique_renders": result.unique_renders,
                "failed_renders": result.failed_renders,
                "silent_scenes": silent_scenes,
                "timings": timings
            }
        )
        return result

    except PipelineError as e:
        if e.run_id is None:
            e.run_id = context.run_id
        logger.error(f"Composition failed: {e.message}", exc_info=True, extra={"error_type": type(e).__name__})
        raise
