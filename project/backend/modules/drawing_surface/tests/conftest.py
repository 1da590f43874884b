"""
Pytest fixtures for drawing surface tests.
"""
import pytest

from modules.drawing_surface import SlideContent
from shared.models.scene import Speaker


@pytest.fixture
def roster():
    return [
        Speaker(id="teacher", name="Ms. Rivera", voice="emily", color="#1a5276"),
        Speaker(id="student1", name="Sam", voice="jasmine", color="#e74c3c"),
    ]


@pytest.fixture
def make_slide(roster):
    """Factory for slides."""
    def _make_slide(**fields):
        values = {"speaker": "teacher", "title": "Photosynthesis", "content": "Plants make food from light.", "roster": roster}
        values.update(fields)
        return SlideContent(**values)
    return _make_slide
