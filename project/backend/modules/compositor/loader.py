"""
Lesson script loader for compositor module.

Reads a lesson script (JSON with a "speakers" map and a "lessonSteps" list)
into validated Lesson, Speaker and Scene models.
"""
import json
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError as PydanticValidationError

from modules.drawing_surface import validate_directive_names
from shared.errors import ValidationError
from shared.logging import get_logger
from shared.models.scene import Lesson, Scene, Speaker

logger = get_logger("compositor.loader")


def validate_lesson(lesson: Lesson) -> None:
    """
    Reject lessons that cannot be composed, before any expensive work.

    Scene indices are (re)assigned from input order.

    Raises:
        ValidationError: On an empty lesson, unknown speakers, blank titles
            or narration, or unknown directives
    """
    if not lesson.scenes:
        raise ValidationError("Lesson has no scenes")

    for position, scene in enumerate(lesson.scenes):
        scene.index = position
        if scene.speaker not in lesson.speakers:
            raise ValidationError(f"Scene {position + 1} uses unknown speaker '{scene.speaker}'")
        if not scene.title.strip():
            raise ValidationError(f"Scene {position + 1} has an empty title")
        if not scene.narration.strip():
            raise ValidationError(f"Scene {position + 1} has empty narration")

    validate_directive_names(scene.visual.name if scene.visual else None for scene in lesson.scenes)


def parse_lesson(data: Dict[str, Any]) -> Lesson:
    """
    Build a Lesson from decoded lesson script data.

    Args:
        data: Mapping with "speakers" and "lessonSteps"

    Returns:
        Validated Lesson with scenes indexed in input order

    Raises:
        ValidationError: On missing sections, malformed entries, unknown
            speakers, or unknown visual directives
    """
    if not isinstance(data, dict):
        raise ValidationError("Lesson script must be a JSON object")

    raw_speakers = data.get("speakers")
    raw_steps = data.get("lessonSteps")
    if not isinstance(raw_speakers, dict) or not raw_speakers:
        raise ValidationError("Lesson script requires a non-empty 'speakers' object")
    if not isinstance(raw_steps, list) or not raw_steps:
        raise ValidationError("Lesson script requires a non-empty 'lessonSteps' list")

    try:
        speakers = {
            speaker_id: Speaker(id=speaker_id, **fields)
            for speaker_id, fields in raw_speakers.items()
        }
    except (PydanticValidationError, TypeError) as e:
        raise ValidationError(f"Invalid speaker definition: {e}") from e

    scenes = []
    for index, step in enumerate(raw_steps):
        if not isinstance(step, dict):
            raise ValidationError(f"Lesson step {index + 1} must be an object")
        try:
            scenes.append(Scene(index=index, **step))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid lesson step {index + 1}: {e}") from e

    lesson = Lesson(speakers=speakers, scenes=scenes)
    validate_lesson(lesson)
    return lesson


def load_lesson(path: Union[str, Path]) -> Lesson:
    """
    Load a lesson script from a JSON file.

    Raises:
        ValidationError: If the file cannot be read or is not a valid lesson
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValidationError(f"Cannot read lesson script {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Lesson script {path} is not valid JSON: {e}") from e

    lesson = parse_lesson(data)
    logger.info(
        f"Loaded lesson with {len(lesson.scenes)} scenes and {len(lesson.speakers)} speakers",
        extra={"path": str(path), "scene_count": len(lesson.scenes), "speaker_count": len(lesson.speakers)}
    )
    return lesson
