"""
Pytest fixtures for compositor tests.
"""
import asyncio
import pytest
from pathlib import Path
from typing import Dict, List, Optional

from modules.compositor.config import CompositorConfig, TimingConfig
from modules.compositor.context import RunContext
from shared.errors import SynthesisError
from shared.models.scene import Lesson, Scene, Speaker


class FakeSynthesizer:
    """
    In-memory speech synthesizer.

    The "audio" written for a scene is its narration text, and probe_duration
    reads it back to look up the duration configured for that narration.
    """

    def __init__(
        self,
        durations: Optional[Dict[str, float]] = None,
        default_duration: float = 2.0,
        fail_on: Optional[List[str]] = None,
        delay: float = 0.0
    ):
        self.durations = durations or {}
        self.default_duration = default_duration
        self.fail_on = set(fail_on or [])
        self.delay = delay
        self.voice_settings = {"sample_rate": 24000, "speed": 1.0}
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def synthesize(self, text: str, speaker: Speaker) -> bytes:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if text in self.fail_on:
                raise SynthesisError(f"Synthesis failed for {text!r}")
            return text.encode("utf-8")
        finally:
            self.in_flight -= 1

    async def probe_duration(self, audio_path) -> float:
        text = Path(audio_path).read_bytes().decode("utf-8")
        return self.durations.get(text, self.default_duration)


def write_fake_render(slide, output_path: Path) -> Path:
    """Render function that writes a small marker file instead of a PNG."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(f"render:{slide.title}".encode("utf-8"))
    return output_path


@pytest.fixture
def speakers():
    """Two speakers: a teacher and a student."""
    return {
        "teacher": Speaker(id="teacher", name="Ms. Rivera", voice="emily", color="#1a5276"),
        "student1": Speaker(id="student1", name="Sam", voice="jasmine", color="#e74c3c"),
    }


@pytest.fixture
def make_scene():
    """Factory for scenes."""
    def _make_scene(index: int = 0, speaker: str = "teacher", title: Optional[str] = None, **kwargs):
        fields = {
            "narration": f"Narration for scene {index + 1}",
            "visual_duration_hint": 4.0,
        }
        fields.update(kwargs)
        return Scene(index=index, speaker=speaker, title=title or f"Scene {index + 1}", **fields)
    return _make_scene


@pytest.fixture
def make_lesson(speakers, make_scene):
    """Factory for lessons from (speaker, title) pairs."""
    def _make_lesson(specs: List[tuple]) -> Lesson:
        scenes = [make_scene(i, speaker=speaker, title=title) for i, (speaker, title) in enumerate(specs)]
        return Lesson(speakers=speakers, scenes=scenes)
    return _make_lesson


@pytest.fixture
def compositor_config():
    """Engine config with the volume boost pass disabled."""
    return CompositorConfig(
        timing=TimingConfig(),
        apply_volume_boost=False,
        render_backend="thread",
        render_workers=2,
    )


@pytest.fixture
def make_context(tmp_path, compositor_config):
    """Factory for run contexts rooted in tmp_path."""
    def _make_context(lesson: Lesson, config: Optional[CompositorConfig] = None) -> RunContext:
        return RunContext(
            lesson=lesson,
            output_dir=tmp_path / "run",
            video_name="lesson",
            config=config or compositor_config,
            run_id="test-run",
        )
    return _make_context


@pytest.fixture
def synthesizer_factory():
    """The FakeSynthesizer class, for tests that need custom durations or failures."""
    return FakeSynthesizer


@pytest.fixture
def fake_render():
    """Render function writing marker files."""
    return write_fake_render
