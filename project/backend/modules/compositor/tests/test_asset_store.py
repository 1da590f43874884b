"""
Unit tests for asset_store module.
"""
import pytest

from modules.compositor.asset_store import (
    AssetStore,
    audio_key,
    boosted_audio_key,
    input_fingerprint,
    narration_fingerprint,
    placeholder_key,
    render_key,
)
from shared.errors import ValidationError
from shared.models.scene import Speaker


class TestKeys:
    """Tests for deterministic asset keys."""

    def test_audio_keys_are_one_based(self):
        assert audio_key(0, "teacher", "0123abcd") == "audio/step_001_teacher_0123abcd.wav"
        key = boosted_audio_key(11, "student1", "0123abcd", "3dB")
        assert key.startswith("audio/boosted/step_012_student1_")
        assert key.endswith("_boosted.wav")

    def test_fingerprint_is_stable_and_short(self):
        assert input_fingerprint("Hello", 1.0) == input_fingerprint("Hello", 1.0)
        assert len(input_fingerprint("Hello")) == 16

    def test_narration_edit_changes_audio_key(self):
        speaker = Speaker(id="teacher", name="Ms. Rivera", voice="emily")
        settings = {"sample_rate": 24000, "speed": 1.0}
        original = narration_fingerprint("Plants make food.", speaker, settings)

        assert narration_fingerprint("Plants make food from light.", speaker, settings) != original
        assert narration_fingerprint("Plants make food.", speaker.model_copy(update={"voice": "arnav"}), settings) != original
        assert narration_fingerprint("Plants make food.", speaker, {"sample_rate": 24000, "speed": 1.2}) != original
        assert audio_key(0, "teacher", original) != audio_key(0, "teacher", narration_fingerprint("Edited.", speaker, settings))

    def test_boost_level_changes_boosted_key(self):
        assert boosted_audio_key(0, "teacher", "0123abcd", "3dB") != boosted_audio_key(0, "teacher", "0123abcd", "6dB")

    def test_render_keys(self):
        assert render_key("abc") == "unique_frames/unique_abc.png"
        assert placeholder_key("abc") == "unique_frames/placeholder_abc.png"


class TestAssetStore:
    """Tests for AssetStore."""

    def test_exists_requires_non_empty_file(self, tmp_path):
        store = AssetStore(tmp_path)
        assert store.exists("audio/step_001_teacher.wav") is False

        store.prepare("audio/step_001_teacher.wav").write_bytes(b"")
        assert store.exists("audio/step_001_teacher.wav") is False

        store.write_bytes("audio/step_001_teacher.wav", b"RIFF")
        assert store.exists("audio/step_001_teacher.wav") is True

    def test_write_bytes_leaves_no_partial_file(self, tmp_path):
        store = AssetStore(tmp_path)
        path = store.write_bytes("unique_frames/unique_abc.png", b"png")

        assert path.read_bytes() == b"png"
        assert not list(path.parent.glob("*.part"))

    def test_key_cannot_escape_root(self, tmp_path):
        store = AssetStore(tmp_path / "run")
        with pytest.raises(ValidationError):
            store.path_for("../outside.wav")
