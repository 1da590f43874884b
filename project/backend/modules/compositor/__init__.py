"""
Compositor module.

Turns an ordered lesson of narrated, visually directed scenes into one
time-synchronized video.
"""

from modules.compositor.config import CompositorConfig, TimingConfig
from modules.compositor.loader import load_lesson, parse_lesson
from modules.compositor.process import process

__all__ = ["CompositorConfig", "TimingConfig", "load_lesson", "parse_lesson", "process"]
