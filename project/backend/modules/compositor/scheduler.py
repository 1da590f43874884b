"""
Parallel render scheduler for compositor module.

Runs the two expensive workloads of a composition: speech synthesis (one
task per scene) and slide rendering (one task per unique content hash).
Each workload is processed in fixed-size batches, a batch finishing
completely before the next starts, while the two workloads run side by side.
"""
import asyncio
import multiprocessing
from concurrent.futures import BrokenExecutor, Executor, ProcessPoolExecutor, ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, TypeVar, Union

from pydantic import BaseModel

from modules.drawing_surface import SlideContent, render_placeholder, render_slide
from shared.config import settings
from shared.errors import CompositionError, RenderError, SynthesisError
from shared.logging import get_logger
from shared.models.scene import Scene, Speaker
from .asset_store import audio_key, boosted_audio_key, narration_fingerprint, placeholder_key, render_key
from .context import RunContext
from .frame_cache import CacheEntry
from .render_worker import RenderFn, RenderResult, RenderTask, execute_render_task
from .utils import run_ffmpeg_command

logger = get_logger("compositor.scheduler")

T = TypeVar("T")


class SpeechSynthesizer(Protocol):
    """Text-to-speech collaborator used for scene narration."""

    # Parameters besides text and speaker that change the produced audio
    voice_settings: Dict[str, Any]

    async def synthesize(self, text: str, speaker: Speaker) -> bytes:
        ...

    async def probe_duration(self, audio_path: Union[str, Path]) -> float:
        ...


class SchedulerReport(BaseModel):
    """Counts collected while scheduling one run."""

    audio_generated: int = 0
    audio_reused: int = 0
    audio_failed: int = 0
    audio_skipped: int = 0
    renders_completed: int = 0
    renders_reused: int = 0
    renders_failed: int = 0
    duplicate_scenes: int = 0


async def run_in_batches(
    items: Sequence[T],
    batch_size: int,
    worker: Callable[[T], Awaitable[None]],
    label: str,
    before_batch: Optional[Callable[[], None]] = None
) -> None:
    """
    Run worker over items, at most batch_size at a time.

    Every member of a batch settles before the next batch starts. Workers
    handle their own expected failures; anything that still escapes is
    re-raised once the batch has settled. before_batch, if given, is called
    ahead of each batch.
    """
    total_batches = (len(items) + batch_size - 1) // batch_size
    for batch_number, start in enumerate(range(0, len(items), batch_size), start=1):
        batch = items[start:start + batch_size]
        if before_batch is not None:
            before_batch()
        logger.info(
            f"{label}: batch {batch_number}/{total_batches} ({len(batch)} tasks)",
            extra={"workload": label, "batch": batch_number, "batch_size": len(batch)}
        )
        results = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result


class ParallelRenderScheduler:
    """Coordinator for the synthesis and render workloads of one run."""

    def __init__(
        self,
        context: RunContext,
        synthesizer: Optional[SpeechSynthesizer] = None,
        render_fn: RenderFn = render_slide,
        executor: Optional[Executor] = None
    ):
        """
        Initialize scheduler.

        Args:
            context: Run context (lesson, config, store, cache)
            synthesizer: Speech synthesizer, None to produce a silent lesson
            render_fn: Slide renderer executed by workers; must be a
                module-level function when the process backend is used
            executor: Executor for render workers (created from config if omitted)
        """
        self.context = context
        self.config = context.config
        self.store = context.store
        self.cache = context.cache
        self.synthesizer = synthesizer
        self.render_fn = render_fn
        self._executor = executor
        self._owns_executor = executor is None
        self._executor_broken = False
        self._roster = list(context.lesson.speakers.values())
        self._scenes_by_index: Dict[int, Scene] = {scene.index: scene for scene in context.scenes}
        self.report = SchedulerReport()

    def _create_executor(self, max_workers: Optional[int] = None) -> Executor:
        workers = max_workers or self.config.render_workers
        if self.config.render_backend == "process":
            mp_context = None
            if self.config.process_start_method:
                mp_context = multiprocessing.get_context(self.config.process_start_method)
            return ProcessPoolExecutor(max_workers=workers, mp_context=mp_context)
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="render-worker")

    def _ensure_executor(self) -> None:
        """Make sure a usable render executor exists, replacing one a dead worker broke."""
        if self._executor is not None and not self._executor_broken:
            return
        if self._executor is not None:
            logger.warning("Render worker pool is broken, starting a new one")
            if self._owns_executor:
                self._executor.shutdown(wait=False)
        self._executor = self._create_executor()
        self._owns_executor = True
        self._executor_broken = False

    async def run(self) -> SchedulerReport:
        """
        Produce audio for every scene and a still for every unique hash.

        Dedup decisions are all made before the first render starts. The
        cache is sealed once rendering is done, and every scene leaves with
        a render_asset_ref.

        Returns:
            Counts of generated, reused and failed work
        """
        scenes = self.context.scenes
        counts = self.cache.register_all(scenes)
        self.report.duplicate_scenes = counts["duplicates"]

        try:
            await asyncio.gather(
                self._run_audio(scenes),
                self._run_renders(self.cache.masters())
            )
        finally:
            if self._owns_executor and self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

        self.cache.seal()
        self.cache.resolve_scene_assets(scenes)

        logger.info(
            "Scheduling complete",
            extra={
                "audio_generated": self.report.audio_generated,
                "audio_reused": self.report.audio_reused,
                "audio_failed": self.report.audio_failed,
                "renders_completed": self.report.renders_completed,
                "renders_reused": self.report.renders_reused,
                "renders_failed": self.report.renders_failed,
            }
        )
        return self.report

    # Audio workload

    async def _run_audio(self, scenes: List[Scene]) -> None:
        if self.synthesizer is None:
            logger.warning("No speech synthesizer configured, every scene will be silent")
            for scene in scenes:
                self._mark_silent(scene)
            self.report.audio_skipped = len(scenes)
            return

        await run_in_batches(scenes, self.config.max_parallel_audio, self._synthesize_scene, "audio")

    def _mark_silent(self, scene: Scene) -> None:
        scene.actual_audio_duration = 0.0
        scene.audio_asset_ref = None

    async def _synthesize_scene(self, scene: Scene) -> None:
        """Synthesize, boost and probe one scene's narration; degrade to silent on failure."""
        if not scene.narration.strip():
            self._mark_silent(scene)
            self.report.audio_skipped += 1
            return

        speaker = self.context.lesson.speaker_for(scene)
        fingerprint = narration_fingerprint(scene.narration, speaker, self.synthesizer.voice_settings)
        key = audio_key(scene.index, scene.speaker, fingerprint)

        if self.store.exists(key):
            self.report.audio_reused += 1
            logger.debug(f"Reusing audio for scene {scene.index + 1}", extra={"scene_index": scene.index, "key": key})
        else:
            try:
                data = await self._call_synthesizer(scene, speaker)
            except SynthesisError as e:
                logger.warning(
                    f"Audio generation failed for scene {scene.index + 1}, continuing silent: {e}",
                    extra={"scene_index": scene.index, "speaker": scene.speaker, "error": str(e)}
                )
                self._mark_silent(scene)
                self.report.audio_failed += 1
                return
            self.store.write_bytes(key, data)
            self.report.audio_generated += 1

        if self.config.apply_volume_boost:
            key = await self._boost_volume(scene, key, fingerprint)

        duration = await self.synthesizer.probe_duration(self.store.path_for(key))
        if duration <= 0:
            logger.warning(
                f"Could not determine audio duration for scene {scene.index + 1}, continuing silent",
                extra={"scene_index": scene.index, "key": key}
            )
            self._mark_silent(scene)
            self.report.audio_failed += 1
            return

        scene.audio_asset_ref = key
        scene.actual_audio_duration = duration
        logger.info(
            f"Audio ready for scene {scene.index + 1} ({duration:.2f}s)",
            extra={"scene_index": scene.index, "duration": duration, "key": key}
        )

    async def _call_synthesizer(self, scene: Scene, speaker: Speaker) -> bytes:
        try:
            return await self.synthesizer.synthesize(scene.narration, speaker)
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"Speech synthesizer raised {type(e).__name__}: {e}") from e

    async def _boost_volume(self, scene: Scene, raw_key: str, fingerprint: str) -> str:
        """
        Return the key of the volume boosted copy of raw_key.

        Falls back to raw_key when the boost pass fails.
        """
        boosted = boosted_audio_key(scene.index, scene.speaker, fingerprint, self.config.volume_boost)
        if self.store.exists(boosted):
            return boosted

        output_path = self.store.prepare(boosted)
        tmp_path = output_path.with_name(output_path.name + ".part")
        cmd = [
            settings.ffmpeg_bin,
            "-i", str(self.store.path_for(raw_key)),
            "-filter:a", f"volume={self.config.volume_boost}",
            "-f", "wav",
            "-y",
            str(tmp_path)
        ]
        try:
            await run_ffmpeg_command(cmd, timeout=self.config.ffmpeg_timeout, label="volume boost")
            tmp_path.replace(output_path)
        except (CompositionError, OSError) as e:
            logger.warning(
                f"Volume boost failed for scene {scene.index + 1}, using original audio: {e}",
                extra={"scene_index": scene.index, "error": str(e)}
            )
            tmp_path.unlink(missing_ok=True)
            return raw_key

        if not self.store.exists(boosted):
            return raw_key
        return boosted

    # Render workload

    async def _run_renders(self, masters: List[CacheEntry]) -> None:
        await run_in_batches(
            masters,
            self.config.max_parallel_renders,
            self._render_master,
            "render",
            before_batch=self._ensure_executor
        )

    def _slide_for(self, scene: Scene) -> SlideContent:
        return SlideContent.from_scene(scene, self._roster)

    async def _execute(self, task: RenderTask) -> RenderResult:
        """
        Run a render task on the worker pool.

        A worker that dies takes the whole pool down with it, failing every
        task still pending there. Those tasks are run again one at a time in
        a private single-worker pool, so only the task that kills its worker
        ends up failed.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, partial(execute_render_task, task, self.render_fn))
        except BrokenExecutor as e:
            self._executor_broken = True
            logger.warning(
                f"Render worker pool broke while rendering {task.content_hash[:12]}, rendering it in isolation",
                extra={"content_hash": task.content_hash, "error": str(e)}
            )
            return await self._execute_isolated(task)
        except Exception as e:
            return self._failed_result(task, e)

    async def _execute_isolated(self, task: RenderTask) -> RenderResult:
        loop = asyncio.get_running_loop()
        executor = self._create_executor(max_workers=1)
        try:
            return await loop.run_in_executor(executor, partial(execute_render_task, task, self.render_fn))
        except Exception as e:
            return self._failed_result(task, e)
        finally:
            executor.shutdown(wait=False)

    @staticmethod
    def _failed_result(task: RenderTask, error: Exception) -> RenderResult:
        return RenderResult(
            content_hash=task.content_hash,
            success=False,
            error=f"Render worker failed: {type(error).__name__}: {error}"
        )

    async def _render_master(self, entry: CacheEntry) -> None:
        """Render the still of one content hash, or store a placeholder for it."""
        scene = self._scenes_by_index[entry.master_index]
        key = render_key(entry.content_hash)

        if self.store.exists(key):
            self.cache.store(entry.content_hash, key)
            self.report.renders_reused += 1
            logger.debug(f"Reusing render for scene {scene.index + 1}", extra={"scene_index": scene.index, "key": key})
            return

        task = RenderTask(
            content_hash=entry.content_hash,
            directive=scene.visual.name if scene.visual else None,
            params=list(scene.visual.params) if scene.visual else [],
            output_ref=key,
            output_path=self.store.prepare(key),
            slide=self._slide_for(scene)
        )

        result = await self._execute(task)

        if result.success and self.store.exists(key):
            self.cache.store(entry.content_hash, key)
            self.report.renders_completed += 1
            logger.info(
                f"Rendered unique frame for scene {scene.index + 1}",
                extra={"scene_index": scene.index, "content_hash": entry.content_hash, "scenes_sharing": len(entry.scene_indices)}
            )
            return

        error = RenderError(result.error or f"Renderer produced no output at {key}")
        logger.warning(
            f"Render failed for scene {scene.index + 1}, using placeholder: {error}",
            extra={"scene_index": scene.index, "content_hash": entry.content_hash, "error": str(error)}
        )
        await self._store_placeholder(entry, scene, str(error))

    async def _store_placeholder(self, entry: CacheEntry, scene: Scene, reason: str) -> None:
        key = placeholder_key(entry.content_hash)
        if not self.store.exists(key):
            await asyncio.to_thread(render_placeholder, self._slide_for(scene), reason, self.store.prepare(key))
        self.cache.store(entry.content_hash, key, is_placeholder=True)
        self.report.renders_failed += 1
