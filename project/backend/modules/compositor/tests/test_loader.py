"""
Unit tests for loader module.
"""
import json
import pytest

from modules.compositor.loader import load_lesson, parse_lesson
from shared.errors import ValidationError


@pytest.fixture
def lesson_data():
    return {
        "speakers": {
            "teacher": {"name": "Ms. Rivera", "voice": "emily", "model": "lightning", "color": "#1A5276"},
            "student1": {"name": "Sam", "voice": "jasmine", "color": "#e74c3c"},
        },
        "lessonSteps": [
            {
                "speaker": "teacher",
                "title": "What is photosynthesis?",
                "content": "Plants make food from light.",
                "narration": "Today we look at how plants make food.",
                "visual": {"type": "process_flow", "params": ["Light", "Chlorophyll", "Sugar"]},
                "visualDuration": 6,
            },
            {
                "speaker": "student1",
                "title": "The equation",
                "narration": "Is there a formula for it?",
                "equation": "6CO2 + 6H2O -> C6H12O6 + 6O2",
                "isComplex": True,
            },
        ],
    }


class TestParseLesson:
    """Tests for parse_lesson function."""

    def test_valid_lesson(self, lesson_data):
        lesson = parse_lesson(lesson_data)

        assert list(lesson.speakers) == ["teacher", "student1"]
        assert lesson.speakers["teacher"].color == "#1a5276"
        assert [s.index for s in lesson.scenes] == [0, 1]
        assert lesson.scenes[0].visual.name == "process_flow"
        assert lesson.scenes[0].visual_duration_hint == 6
        assert lesson.scenes[1].is_complex is True
        assert lesson.scenes[1].visual_duration_hint == 4.0

    def test_unknown_speaker(self, lesson_data):
        lesson_data["lessonSteps"][1]["speaker"] = "student9"
        with pytest.raises(ValidationError, match="unknown speaker 'student9'"):
            parse_lesson(lesson_data)

    def test_unknown_directive(self, lesson_data):
        lesson_data["lessonSteps"][0]["visual"] = {"type": "draw_moon_phases", "params": []}
        with pytest.raises(ValidationError, match="draw_moon_phases"):
            parse_lesson(lesson_data)

    @pytest.mark.parametrize("field", ["title", "narration"])
    def test_missing_required_field(self, lesson_data, field):
        del lesson_data["lessonSteps"][0][field]
        with pytest.raises(ValidationError, match="lesson step 1"):
            parse_lesson(lesson_data)

    def test_blank_narration(self, lesson_data):
        lesson_data["lessonSteps"][1]["narration"] = "   "
        with pytest.raises(ValidationError, match="empty narration"):
            parse_lesson(lesson_data)

    def test_blank_title(self, lesson_data):
        lesson_data["lessonSteps"][0]["title"] = ""
        with pytest.raises(ValidationError, match="Scene 1 has an empty title"):
            parse_lesson(lesson_data)

    def test_non_positive_duration(self, lesson_data):
        lesson_data["lessonSteps"][0]["visualDuration"] = 0
        with pytest.raises(ValidationError):
            parse_lesson(lesson_data)

    def test_empty_steps(self, lesson_data):
        lesson_data["lessonSteps"] = []
        with pytest.raises(ValidationError, match="lessonSteps"):
            parse_lesson(lesson_data)

    def test_bad_speaker_color(self, lesson_data):
        lesson_data["speakers"]["teacher"]["color"] = "navy"
        with pytest.raises(ValidationError, match="Invalid speaker definition"):
            parse_lesson(lesson_data)


class TestLoadLesson:
    """Tests for load_lesson function."""

    def test_load_from_file(self, tmp_path, lesson_data):
        path = tmp_path / "lesson.json"
        path.write_text(json.dumps(lesson_data), encoding="utf-8")

        lesson = load_lesson(path)

        assert len(lesson.scenes) == 2

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "lesson.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError, match="not valid JSON"):
            load_lesson(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="Cannot read"):
            load_lesson(tmp_path / "missing.json")
