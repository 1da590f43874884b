"""
Data models for the lesson compositor.

This module exports all Pydantic models used across pipeline modules.
"""

from .scene import Speaker, VisualDirective, Scene, Lesson
from .video import MixTrack, MixPlan, CompositionResult

__all__ = [
    # Lesson models
    "Speaker",
    "VisualDirective",
    "Scene",
    "Lesson",
    # Composition models
    "MixTrack",
    "MixPlan",
    "CompositionResult",
]
