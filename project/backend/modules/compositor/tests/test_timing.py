"""
Unit tests for timing module.
"""
import pytest

from modules.compositor.config import TimingConfig
from modules.compositor.timing import calculate_effective_duration, resolve_timing


@pytest.fixture
def timing():
    return TimingConfig(
        min_slide_duration=4.0,
        post_audio_pause=1.5,
        complex_slide_bonus=2.0,
        speaker_change_pause=0.3,
        initial_buffer=1.0,
        trailing_buffer=1.0,
    )


class TestResolveTiming:
    """Tests for resolve_timing function."""

    def test_silent_scenes_with_speaker_changes(self, make_scene, timing):
        """Three silent scenes alternating speakers."""
        scenes = [
            make_scene(0, speaker="teacher", visual_duration_hint=5),
            make_scene(1, speaker="student1", visual_duration_hint=4),
            make_scene(2, speaker="teacher", visual_duration_hint=6),
        ]

        timeline = resolve_timing(scenes, timing)

        assert timeline.effective_durations == pytest.approx([5.0, 4.3, 6.3])
        assert timeline.audio_delays == pytest.approx([1.0, 6.0, 10.3])
        assert timeline.target_duration == pytest.approx(17.6)
        assert [s.effective_duration for s in scenes] == pytest.approx([5.0, 4.3, 6.3])
        assert [s.audio_delay for s in scenes] == pytest.approx([1.0, 6.0, 10.3])

    def test_audio_plus_pause_extends_scene(self, make_scene, timing):
        """Audio of 3.2s with a 1.5s pause beats the 4s minimum."""
        scene = make_scene(0, visual_duration_hint=4, actual_audio_duration=3.2)

        timeline = resolve_timing([scene], timing)

        assert scene.effective_duration == pytest.approx(4.7)
        assert timeline.target_duration == pytest.approx(1.0 + 4.7 + 1.0)

    def test_non_overlap(self, make_scene, timing):
        """Each scene starts after the previous one ends."""
        scenes = [
            make_scene(i, speaker="teacher" if i % 2 else "student1",
                       visual_duration_hint=1 + i, actual_audio_duration=0.5 * i, is_complex=i == 2)
            for i in range(6)
        ]

        resolve_timing(scenes, timing)

        for previous, current in zip(scenes, scenes[1:]):
            assert current.audio_delay >= previous.audio_delay + previous.effective_duration - 1e-9

    def test_minimum_duration_holds(self, make_scene, timing):
        """No scene is shorter than the minimum slide duration."""
        scenes = [make_scene(i, visual_duration_hint=0.5) for i in range(3)]

        resolve_timing(scenes, timing)

        assert all(s.effective_duration >= timing.min_slide_duration for s in scenes)

    def test_idempotent(self, make_scene, timing):
        """Resolving twice yields the same timeline."""
        scenes = [
            make_scene(0, speaker="teacher", actual_audio_duration=6.1),
            make_scene(1, speaker="student1", is_complex=True),
        ]

        first = resolve_timing(scenes, timing)
        second = resolve_timing(scenes, timing)

        assert first == second

    def test_empty_scene_list(self, timing):
        """No scenes still yields the buffers."""
        timeline = resolve_timing([], timing)
        assert timeline.effective_durations == []
        assert timeline.target_duration == pytest.approx(2.0)


class TestCalculateEffectiveDuration:
    """Tests for calculate_effective_duration function."""

    def test_hint_wins_when_longest(self, make_scene, timing):
        scene = make_scene(0, visual_duration_hint=9.0, actual_audio_duration=3.0)
        assert calculate_effective_duration(scene, None, timing) == pytest.approx(9.0)

    def test_complex_bonus(self, make_scene, timing):
        scene = make_scene(0, visual_duration_hint=4.0, is_complex=True)
        assert calculate_effective_duration(scene, None, timing) == pytest.approx(6.0)

    def test_no_pause_for_same_speaker(self, make_scene, timing):
        previous = make_scene(0, speaker="teacher")
        scene = make_scene(1, speaker="teacher", visual_duration_hint=5.0)
        assert calculate_effective_duration(scene, previous, timing) == pytest.approx(5.0)

    def test_all_rules_combined(self, make_scene, timing):
        previous = make_scene(0, speaker="teacher")
        scene = make_scene(1, speaker="student1", actual_audio_duration=7.0, is_complex=True)
        # max(4, 7, 4, 8.5) + 2.0 + 0.3
        assert calculate_effective_duration(scene, previous, timing) == pytest.approx(10.8)
